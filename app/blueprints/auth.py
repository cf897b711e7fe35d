"""
Auth blueprint – local email/password sessions via Flask-Login.

GET|POST /auth/login      – sign in
GET|POST /auth/register   – create account + profile
POST     /auth/logout     – sign out
"""
import logging
from datetime import datetime, timezone

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_user, logout_user, login_required, current_user
from flask_login import user_logged_in, user_logged_out
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.extensions import db, limiter
from app.models.user import User
from app.models.profile import Profile

log = logging.getLogger(__name__)
auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


# ── Session-change notifications ──────────────────────────────────────────────

@user_logged_in.connect
def _on_login(sender, user, **extra):
    log.info("session started for user %s", user.id)


@user_logged_out.connect
def _on_logout(sender, user, **extra):
    if user is not None and getattr(user, "is_authenticated", False):
        log.info("session ended for user %s", user.id)


def _safe_next(default_endpoint: str = "feed.index") -> str:
    target = request.args.get("next", "")
    # Only local paths – never redirect off-site
    if target.startswith("/") and not target.startswith("//"):
        return target
    return url_for(default_endpoint)


# ── Login ─────────────────────────────────────────────────────────────────────

@auth_bp.route("/login", methods=["GET", "POST"])
@limiter.limit("10 per minute", methods=["POST"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("feed.index"))

    from app.forms.auth import LoginForm
    form = LoginForm()

    if form.validate_on_submit():
        user = User.query.filter_by(email=form.email.data.strip().lower()).first()
        if user is None or not user.check_password(form.password.data):
            flash("Invalid email or password.", "danger")
        elif not user.is_active:
            flash("This account has been disabled.", "danger")
        else:
            user.last_login = datetime.now(timezone.utc)
            db.session.commit()
            login_user(user, remember=form.remember.data)
            return redirect(_safe_next())

    return render_template("auth/login.html", form=form)


# ── Register ──────────────────────────────────────────────────────────────────

@auth_bp.route("/register", methods=["GET", "POST"])
@limiter.limit("5 per minute", methods=["POST"])
def register():
    if current_user.is_authenticated:
        return redirect(url_for("feed.index"))

    from app.forms.auth import RegisterForm
    form = RegisterForm()

    if form.validate_on_submit():
        email    = form.email.data.strip().lower()
        username = form.username.data.strip()

        if User.query.filter_by(email=email).first():
            form.email.errors.append("An account with this email already exists.")
        elif Profile.query.filter_by(username=username).first():
            form.username.errors.append("Username already taken.")
        else:
            user = User(email=email, is_active=True)
            user.set_password(form.password.data)
            user.profile = Profile(username=username)
            db.session.add(user)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                flash("That email or username was just taken, please pick another.", "danger")
                return render_template("auth/register.html", form=form)
            except SQLAlchemyError:
                db.session.rollback()
                log.exception("Registration failed for %s", email)
                flash("Something went wrong, please try again.", "danger")
                return render_template("auth/register.html", form=form)

            log.info("registered user %s (%s)", user.id, username)
            login_user(user)
            flash("Welcome to FaceOff!", "success")
            return redirect(url_for("feed.index"))

    return render_template("auth/register.html", form=form)


# ── Logout ────────────────────────────────────────────────────────────────────

@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    flash("You have been signed out.", "info")
    return redirect(url_for("feed.index"))
