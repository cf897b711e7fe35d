"""
Profile blueprint – the signed-in user's own activity and display name.

GET  /profile?tab=posts|comments|reactions   – tabbed activity page
POST /profile/username                       – change username (form)
POST /api/profile/username                   – AJAX: change username
"""
from flask import Blueprint, render_template, request, redirect, url_for, flash, jsonify
from flask_login import login_required, current_user

from app.utils import debate_service as svc
from app.utils.helpers import json_body

profile_bp = Blueprint("profile", __name__)

PROFILE_TABS = ("posts", "comments", "reactions")


@profile_bp.route("/profile")
@login_required
def index():
    from app.forms.profile import UsernameForm

    tab = request.args.get("tab", "posts")
    if tab not in PROFILE_TABS:
        tab = "posts"

    activity = svc.fetch_user_activity(current_user)
    form = UsernameForm(data={"username": current_user.username})
    return render_template(
        "profile/index.html",
        activity=activity,
        tab=tab,
        tabs=PROFILE_TABS,
        form=form,
        active_page="profile",
    )


@profile_bp.route("/profile/username", methods=["POST"])
@login_required
def change_username():
    from app.forms.profile import UsernameForm
    form = UsernameForm()

    if form.validate_on_submit():
        try:
            svc.update_username(current_user, form.username.data)
        except svc.ValidationError as exc:
            flash(exc.message, "danger")
        else:
            flash("Username updated.", "success")
    else:
        for errors in form.errors.values():
            for msg in errors:
                flash(msg, "danger")
    return redirect(url_for("profile.index"))


@profile_bp.route("/api/profile/username", methods=["POST"])
@login_required
def change_username_api():
    data = json_body()
    profile = svc.update_username(current_user, data.get("username"))
    return jsonify(success=True, username=profile.username)
