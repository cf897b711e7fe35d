"""
Composer blueprint – start a new debate.

GET|POST /posts/new     – composer page (the feed page posts here too)
POST     /api/posts     – AJAX: create a post {"title", "content", "topic_ids"}
"""
from flask import Blueprint, render_template, request, redirect, url_for, flash, jsonify
from flask_login import login_required, current_user

from app.extensions import limiter
from app.utils import debate_service as svc
from app.utils.helpers import json_body

posts_bp = Blueprint("posts", __name__)


@posts_bp.route("/posts/new", methods=["GET", "POST"])
@login_required
@limiter.limit("20 per hour", methods=["POST"])
def new():
    from app.forms.post import PostForm
    topics = svc.list_topics()
    form = PostForm()
    form.set_topic_choices(topics)

    if request.method == "POST":
        if form.validate_on_submit():
            try:
                svc.create_post(current_user, form.title.data, form.content.data, form.topics.data)
            except svc.ValidationError as exc:
                flash(exc.message, "danger")
            else:
                flash("Your debate is live.", "success")
                return redirect(url_for("feed.index"))
        else:
            flash("Please fill in all fields and select at least one topic.", "danger")

    return render_template("posts/new.html", form=form, topics=topics, active_page="new_post")


@posts_bp.route("/api/posts", methods=["POST"])
@login_required
@limiter.limit("20 per hour")
def create():
    from app.blueprints.feed import serialize_post

    data = json_body()
    topic_ids = data.get("topic_ids") or []
    if not isinstance(topic_ids, list):
        topic_ids = [topic_ids]

    post = svc.create_post(current_user, data.get("title"), data.get("content"), topic_ids)
    return jsonify(success=True, post=serialize_post(post, {}, [])), 201
