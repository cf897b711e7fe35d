"""
Debate feed blueprint.

GET    /                               – feed page (+ composer when signed in)
GET    /api/feed                       – paginated feed, ?topic=<id>&page=<n>
GET    /api/topics                     – topic list for the filter / composer
POST   /api/feed/<id>/react            – toggle support/oppose on a post
POST   /api/feed/<id>/comment          – add a comment
DELETE /api/feed/comment/<id>          – delete own comment
POST   /feed/<id>/react, /feed/<id>/comment – form fallbacks (redirect back)

JSON writes answer with the server's state (fresh counts, the stored
comment) so the page can reconcile its optimistic update in place.
"""

from flask import Blueprint, jsonify, request, render_template, redirect, url_for, current_app
from flask_login import login_required, current_user

from app.extensions import limiter
from app.utils import debate_service as svc
from app.utils.helpers import relative_time, parse_topic_id, json_body

feed_bp = Blueprint("feed", __name__)

# ── helpers ───────────────────────────────────────────────────────────────────

def serialize_author(user) -> dict:
    return {
        "id":       user.id,
        "username": user.username,
        "initials": user.get_initials(),
    }


def serialize_comment(comment) -> dict:
    return {
        "id":            comment.id,
        "post_id":       comment.post_id,
        "content":       comment.content,
        "created_at":    comment.created_at.isoformat(),
        "relative_time": relative_time(comment.created_at),
        "author":        serialize_author(comment.author),
        "is_mine":       current_user.is_authenticated and comment.user_id == current_user.id,
    }


def serialize_post(post, my_reactions: dict, comments: list) -> dict:
    mine = my_reactions.get(post.id)
    return {
        "id":            post.id,
        "title":         post.title,
        "content":       post.content,
        "created_at":    post.created_at.isoformat(),
        "relative_time": relative_time(post.created_at),
        "author":        serialize_author(post.author),
        "topics":        [{"id": t.id, "name": t.name} for t in post.topics],
        "support_count": post.support_count or 0,
        "oppose_count":  post.oppose_count or 0,
        "my_reaction":   mine.value if mine else None,
        "comment_count": len(comments),
        "comments":      [serialize_comment(c) for c in comments],
        "is_mine":       current_user.is_authenticated and post.user_id == current_user.id,
    }


def _load_feed():
    topic_id = parse_topic_id(request.args.get("topic"))
    page     = max(1, request.args.get("page", 1, type=int) or 1)
    feed     = svc.fetch_feed(
        topic_id=topic_id,
        page=page,
        per_page=current_app.config.get("FEED_PAGE_SIZE", 15),
    )
    my_reactions = svc.reactions_for(current_user, [p.id for p in feed.posts])
    return feed, my_reactions


# ── Feed page ─────────────────────────────────────────────────────────────────

@feed_bp.route("/")
def index():
    feed, my_reactions = _load_feed()
    topics = svc.list_topics()

    post_form = comment_form = None
    if current_user.is_authenticated:
        from app.forms.post import PostForm, CommentForm
        post_form = PostForm()
        post_form.set_topic_choices(topics)
        comment_form = CommentForm()

    return render_template(
        "feed/index.html",
        feed=feed,
        topics=topics,
        my_reactions=my_reactions,
        post_form=post_form,
        comment_form=comment_form,
        active_page="feed",
    )


# ── Feed endpoints ────────────────────────────────────────────────────────────

@feed_bp.route("/api/feed")
def get_feed():
    feed, my_reactions = _load_feed()
    return jsonify({
        "posts": [
            serialize_post(p, my_reactions, feed.comments.get(p.id, []))
            for p in feed.posts
        ],
        "has_more": feed.has_more,
        "page":     feed.page,
        "topic_id": feed.topic_id,
    })


@feed_bp.route("/api/topics")
def get_topics():
    return jsonify([{"id": t.id, "name": t.name} for t in svc.list_topics()])


# ── Reaction toggle ───────────────────────────────────────────────────────────

@feed_bp.route("/api/feed/<int:post_id>/react", methods=["POST"])
@login_required
@limiter.limit("60 per minute")
def toggle_reaction(post_id):
    data = json_body()
    outcome = svc.toggle_reaction(current_user, post_id, data.get("reaction_type"))
    return jsonify(success=True, **outcome.to_dict())


@feed_bp.route("/feed/<int:post_id>/react", methods=["POST"])
@login_required
@limiter.limit("60 per minute")
def toggle_reaction_form(post_id):
    svc.toggle_reaction(current_user, post_id, request.form.get("reaction_type"))
    return redirect(request.referrer or url_for("feed.index"))


# ── Comment CRUD ──────────────────────────────────────────────────────────────

@feed_bp.route("/api/feed/<int:post_id>/comment", methods=["POST"])
@login_required
@limiter.limit("30 per minute")
def add_comment(post_id):
    data = json_body()
    comment = svc.add_comment(current_user, post_id, data.get("content"))
    return jsonify(success=True, comment=serialize_comment(comment)), 201


@feed_bp.route("/feed/<int:post_id>/comment", methods=["POST"])
@login_required
@limiter.limit("30 per minute")
def add_comment_form(post_id):
    svc.add_comment(current_user, post_id, request.form.get("content"))
    return redirect(request.referrer or url_for("feed.index"))


@feed_bp.route("/api/feed/comment/<int:comment_id>", methods=["DELETE"])
@login_required
def delete_comment(comment_id):
    svc.delete_comment(current_user, comment_id)
    return jsonify(success=True)
