"""
FaceOff – Flask application factory.
Topic-tagged debate posts with support/oppose reactions and comments.
"""
import os
import logging
from flask import Flask, render_template, redirect, url_for, request, flash, jsonify
from app.config import config
from app.extensions import db, login_manager, csrf, limiter, migrate


def create_app(config_name: str = "default") -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name])

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger("app").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Ensure instance directory exists (SQLite lives here)
    os.makedirs(app.instance_path, exist_ok=True)

    # ── Initialise extensions ────────────────────────────────────────────────
    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    migrate.init_app(app, db)

    if app.config.get("TALISMAN_ENABLED"):
        from flask_talisman import Talisman
        Talisman(app, **app.config.get("TALISMAN_CONFIG", {}))

    # ── Register blueprints ──────────────────────────────────────────────────
    from app.blueprints.auth import auth_bp
    from app.blueprints.feed import feed_bp
    from app.blueprints.posts import posts_bp
    from app.blueprints.profile import profile_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(feed_bp)
    app.register_blueprint(posts_bp)
    app.register_blueprint(profile_bp)

    # ── Login manager hooks ──────────────────────────────────────────────────
    @login_manager.user_loader
    def load_user(user_id):
        from app.models.user import User
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        from app.utils.helpers import wants_json
        if wants_json():
            return jsonify(error="Please sign in to continue."), 401
        flash(login_manager.login_message, login_manager.login_message_category)
        return redirect(url_for("auth.login", next=request.full_path.rstrip("?")))

    # ── Context processors ───────────────────────────────────────────────────
    @app.context_processor
    def inject_globals():
        from flask_login import current_user

        def nav_items():
            """Nav bar entries – profile and sign-out only for signed-in users."""
            if current_user.is_authenticated:
                return [
                    {"label": "Feed",         "url": url_for("feed.index"),   "key": "feed"},
                    {"label": "New Debate",   "url": url_for("posts.new"),    "key": "new_post"},
                    {"label": "Profile",      "url": url_for("profile.index"), "key": "profile"},
                ]
            return [
                {"label": "Feed",     "url": url_for("feed.index"),    "key": "feed"},
                {"label": "Sign In",  "url": url_for("auth.login"),    "key": "login"},
                {"label": "Register", "url": url_for("auth.register"), "key": "register"},
            ]

        current_profile = current_user.profile if current_user.is_authenticated else None
        return dict(nav_items=nav_items, current_profile=current_profile,
                    app_name="FaceOff")

    from app.utils.helpers import relative_time
    app.add_template_filter(relative_time, "relative_time")

    # ── Error handlers ───────────────────────────────────────────────────────
    from app.utils.debate_service import DebateError, Unauthenticated, NotFound, PermissionDenied

    @app.errorhandler(DebateError)
    def debate_error(exc):
        from app.utils.helpers import wants_json
        if wants_json():
            return jsonify(error=exc.message), exc.status_code
        if isinstance(exc, Unauthenticated):
            flash(exc.message, "warning")
            return redirect(url_for("auth.login", next=request.path))
        if isinstance(exc, NotFound):
            return render_template("errors/404.html"), 404
        if isinstance(exc, PermissionDenied):
            return render_template("errors/403.html"), 403
        flash(exc.message, "danger")
        return redirect(request.referrer or url_for("feed.index"))

    @app.errorhandler(403)
    def forbidden(e):
        from app.utils.helpers import wants_json
        if wants_json():
            return jsonify(error="Forbidden"), 403
        return render_template("errors/403.html"), 403

    @app.errorhandler(404)
    def not_found(e):
        from app.utils.helpers import wants_json
        if wants_json():
            return jsonify(error="Not found"), 404
        return render_template("errors/404.html"), 404

    @app.errorhandler(500)
    def internal_error(e):
        db.session.rollback()
        return render_template("errors/500.html"), 500

    # ── Database + seed ──────────────────────────────────────────────────────
    with app.app_context():
        # Register all models with SQLAlchemy before create_all().
        # Using importlib avoids the "import app.models" pattern which would
        # silently shadow the local 'app' Flask-instance variable with the module.
        import importlib
        importlib.import_module("app.models")
        db.create_all()
        _seed_database()

    return app


# ── Seed helper ──────────────────────────────────────────────────────────────
def _seed_database() -> None:
    """Seed the static topic list (idempotent – get-or-create each one)."""
    from app.models.topic import Topic, DEFAULT_TOPICS

    changed = False
    for name in DEFAULT_TOPICS:
        if not Topic.query.filter_by(name=name).first():
            db.session.add(Topic(name=name))
            changed = True
    if changed:
        db.session.commit()
