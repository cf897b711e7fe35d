"""
Debate service: every read and write the feed, composer and profile views
need, in one place.

This module owns all logic for:
  - Toggling a user's support/oppose reaction and keeping the post's
    denormalised counters in sync with the reaction rows
  - Adding and deleting comments, and grouping comments by post
  - Creating a post together with its topic associations
  - Querying the (optionally topic-filtered) feed
  - Changing a profile's username

Each write is one unit of work: it commits once at the end or rolls back
entirely.  Callers (blueprints) translate the DebateError subclasses below
into HTTP responses; nothing here touches the request.
"""
import re
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from app.extensions import db
from app.models.debate import Post, Comment, Reaction, ReactionType
from app.models.profile import Profile
from app.models.topic import Topic

log = logging.getLogger(__name__)

TITLE_MAX_LEN    = 200
CONTENT_MAX_LEN  = 5000
COMMENT_MAX_LEN  = 1000
USERNAME_RE      = re.compile(r"^[\w.\-]{3,64}$")
GENERIC_FAILURE  = "Something went wrong, please try again."
MAX_FEED_PAGE    = 10_000


# ── Errors ────────────────────────────────────────────────────────────────────

class DebateError(Exception):
    """Base class for failures a view can show to the user."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(DebateError):
    status_code = 401


class ValidationError(DebateError):
    status_code = 400


class PermissionDenied(DebateError):
    status_code = 403


class NotFound(DebateError):
    status_code = 404


class BackendError(DebateError):
    """The store failed; whatever the action had not yet committed is gone."""
    status_code = 503


# ── Data classes ──────────────────────────────────────────────────────────────

@dataclass
class ReactionOutcome:
    """Result of a reaction toggle, with the post's authoritative counts."""
    post_id: int
    action: str                         # added | removed | switched
    reaction: ReactionType | None
    support_count: int
    oppose_count: int

    def to_dict(self) -> dict:
        return {
            "post_id":       self.post_id,
            "action":        self.action,
            "my_reaction":   self.reaction.value if self.reaction else None,
            "support_count": self.support_count,
            "oppose_count":  self.oppose_count,
        }


@dataclass
class FeedPage:
    posts: list
    comments: dict                      # post_id -> [Comment, ...] oldest first
    page: int = 1
    has_more: bool = False
    topic_id: int | None = None


@dataclass
class UserActivity:
    posts:     list = field(default_factory=list)
    comments:  list = field(default_factory=list)
    reactions: list = field(default_factory=list)


# ── Internal helpers ──────────────────────────────────────────────────────────

def _require_user(user, doing: str) -> None:
    if user is None or not getattr(user, "is_authenticated", False):
        raise Unauthenticated(f"Please sign in to {doing}.")


@contextmanager
def _unit_of_work(action: str):
    """Commit on success; roll back and re-raise as a DebateError on failure."""
    try:
        yield
        db.session.commit()
    except DebateError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        log.exception("%s failed", action)
        raise BackendError(GENERIC_FAILURE) from exc


def _get_post(post_id) -> Post:
    post = db.session.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found.")
    return post


def parse_reaction_type(value) -> ReactionType:
    """Accept a ReactionType or its string value ('support' / 'oppose')."""
    if isinstance(value, ReactionType):
        return value
    try:
        return ReactionType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Reaction must be 'support' or 'oppose'.") from None


# ── Reactions ─────────────────────────────────────────────────────────────────

def recount_reactions(post: Post) -> tuple[int, int]:
    """Recompute support/oppose counts from the reaction rows and store them
    on the post.  Does NOT commit."""
    rows = (
        db.session.query(Reaction.reaction_type, func.count(Reaction.id))
        .filter(Reaction.post_id == post.id)
        .group_by(Reaction.reaction_type)
        .all()
    )
    counts = {rtype: n for rtype, n in rows}
    post.support_count = counts.get(ReactionType.SUPPORT, 0)
    post.oppose_count  = counts.get(ReactionType.OPPOSE, 0)
    return post.support_count, post.oppose_count


def _apply_toggle(user_id: int, post_id, rtype: ReactionType) -> ReactionOutcome:
    post = _get_post(post_id)
    existing = Reaction.query.filter_by(post_id=post.id, user_id=user_id).first()

    if existing is None:
        db.session.add(Reaction(post_id=post.id, user_id=user_id, reaction_type=rtype))
        action, current = "added", rtype
    elif existing.reaction_type is rtype:
        db.session.delete(existing)
        action, current = "removed", None
    else:
        existing.reaction_type = rtype
        action, current = "switched", rtype

    db.session.flush()
    support, oppose = recount_reactions(post)
    return ReactionOutcome(post.id, action, current, support, oppose)


def toggle_reaction(user, post_id, reaction_type) -> ReactionOutcome:
    """
    Toggle *user*'s reaction on a post.

    Same type as the existing reaction removes it, the other type switches
    sides, no reaction adds one.  The counters are recounted in the same
    transaction.  A concurrent insert for the same (post, user) trips the
    unique constraint; the toggle is then replayed once against the row the
    other request wrote.
    """
    _require_user(user, "react to posts")
    rtype = parse_reaction_type(reaction_type)
    user_id = user.id

    for attempt in (1, 2):
        try:
            outcome = _apply_toggle(user_id, post_id, rtype)
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            if attempt == 2:
                log.exception("Reaction toggle on post %s kept conflicting", post_id)
                raise BackendError(GENERIC_FAILURE) from exc
            log.warning("Reaction conflict on post %s for user %s, retrying", post_id, user_id)
            continue
        except DebateError:
            db.session.rollback()
            raise
        except SQLAlchemyError as exc:
            db.session.rollback()
            log.exception("Reaction toggle on post %s failed", post_id)
            raise BackendError(GENERIC_FAILURE) from exc

        log.info("user %s %s %s on post %s", user_id, outcome.action, rtype.value, outcome.post_id)
        return outcome


def reactions_for(user, post_ids) -> dict:
    """Return {post_id: ReactionType} for the viewer's reactions on post_ids."""
    if user is None or not getattr(user, "is_authenticated", False) or not post_ids:
        return {}
    rows = Reaction.query.filter(
        Reaction.user_id == user.id,
        Reaction.post_id.in_(list(post_ids)),
    ).all()
    return {r.post_id: r.reaction_type for r in rows}


def _clean_text(value, what: str) -> str:
    """Trimmed text, or "" for None.  Anything that is not a string is rejected."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{what} must be text.")
    return value.strip()


def _topic_id(raw) -> int:
    # bools and floats are not ids, even though int() would take them
    if isinstance(raw, bool):
        raise ValueError(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw)
    raise ValueError(raw)


# ── Comments ──────────────────────────────────────────────────────────────────

def add_comment(user, post_id, content) -> Comment:
    """Insert a comment with the trimmed content.  Blank content writes nothing."""
    _require_user(user, "comment")
    body = _clean_text(content, "Comment")
    if not body:
        raise ValidationError("Please enter a comment.")
    if len(body) > COMMENT_MAX_LEN:
        raise ValidationError(f"Comments are limited to {COMMENT_MAX_LEN} characters.")

    with _unit_of_work("add_comment"):
        post = _get_post(post_id)
        comment = Comment(post_id=post.id, user_id=user.id, content=body)
        db.session.add(comment)
    return comment


def delete_comment(user, comment_id) -> None:
    _require_user(user, "delete comments")
    with _unit_of_work("delete_comment"):
        comment = db.session.get(Comment, comment_id)
        if comment is None:
            raise NotFound("Comment not found.")
        if comment.user_id != user.id:
            raise PermissionDenied("You can only delete your own comments.")
        db.session.delete(comment)


def group_comments_by_post(comments, post_ids=()) -> dict:
    """Group comments into {post_id: [comment, ...]}, keeping input order.

    Every id in post_ids gets an entry, even if it has no comments.
    """
    grouped = {pid: [] for pid in post_ids}
    for comment in comments:
        grouped.setdefault(comment.post_id, []).append(comment)
    return grouped


# ── Posts ─────────────────────────────────────────────────────────────────────

def create_post(user, title, content, topic_ids) -> Post:
    """
    Create a post and one post_topics row per distinct topic.

    The post and its associations are flushed in a single transaction, so a
    failure leaves neither behind.
    """
    _require_user(user, "start a debate")
    title   = _clean_text(title, "Title")
    content = _clean_text(content, "Content")
    if topic_ids is not None and not isinstance(topic_ids, (list, tuple, set)):
        raise ValidationError("Invalid topic selection.")
    topic_ids = list(topic_ids or [])

    if not title or not content or not topic_ids:
        raise ValidationError("Please fill in all fields and select at least one topic.")
    if len(title) > TITLE_MAX_LEN:
        raise ValidationError(f"Titles are limited to {TITLE_MAX_LEN} characters.")
    if len(content) > CONTENT_MAX_LEN:
        raise ValidationError(f"Posts are limited to {CONTENT_MAX_LEN} characters.")
    try:
        wanted = list(dict.fromkeys(_topic_id(t) for t in topic_ids))
    except (TypeError, ValueError):
        raise ValidationError("Invalid topic selection.") from None

    with _unit_of_work("create_post"):
        topics = Topic.query.filter(Topic.id.in_(wanted)).all()
        if len(topics) != len(wanted):
            raise ValidationError("Unknown topic selected.")
        post = Post(
            user_id       = user.id,
            title         = title,
            content       = content,
            support_count = 0,
            oppose_count  = 0,
        )
        post.topics = topics
        db.session.add(post)

    log.info("user %s created post %s with %d topic(s)", user.id, post.id, len(wanted))
    return post


def list_topics() -> list:
    return Topic.query.order_by(Topic.name.asc()).all()


def fetch_feed(topic_id=None, page: int = 1, per_page: int = 15) -> FeedPage:
    """
    Posts newest-first (optionally only those tagged with topic_id), plus
    their comments grouped by post id in creation order.
    """
    page = max(1, int(page or 1))
    if page > MAX_FEED_PAGE:
        return FeedPage(posts=[], comments={}, page=page, has_more=False, topic_id=topic_id)
    try:
        query = Post.query.options(joinedload(Post.author), selectinload(Post.topics))
        if topic_id is not None:
            query = query.filter(Post.topics.any(Topic.id == topic_id))
        posts = (
            query
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page + 1)
            .all()
        )
        has_more = len(posts) > per_page
        posts    = posts[:per_page]

        post_ids = [p.id for p in posts]
        comments = []
        if post_ids:
            comments = (
                Comment.query
                .options(joinedload(Comment.author))
                .filter(Comment.post_id.in_(post_ids))
                .order_by(Comment.created_at.asc(), Comment.id.asc())
                .all()
            )
    except SQLAlchemyError as exc:
        db.session.rollback()
        log.exception("Feed query failed")
        raise BackendError(GENERIC_FAILURE) from exc

    return FeedPage(
        posts    = posts,
        comments = group_comments_by_post(comments, post_ids),
        page     = page,
        has_more = has_more,
        topic_id = topic_id,
    )


# ── Profile ───────────────────────────────────────────────────────────────────

def fetch_user_activity(user) -> UserActivity:
    """The user's own posts, comments and reactions, newest first."""
    _require_user(user, "view your profile")
    try:
        posts = (
            Post.query
            .filter(Post.user_id == user.id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )
        comments = (
            Comment.query
            .options(joinedload(Comment.post))
            .filter(Comment.user_id == user.id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )
        reactions = (
            Reaction.query
            .options(joinedload(Reaction.post))
            .filter(Reaction.user_id == user.id)
            .order_by(Reaction.created_at.desc(), Reaction.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        log.exception("Profile activity query failed for user %s", user.id)
        raise BackendError(GENERIC_FAILURE) from exc
    return UserActivity(posts=posts, comments=comments, reactions=reactions)


def validate_username(candidate) -> str:
    name = _clean_text(candidate, "Username")
    if not name:
        raise ValidationError("Username cannot be empty.")
    if not USERNAME_RE.match(name):
        raise ValidationError(
            "Usernames are 3–64 characters: letters, digits, '.', '-' and '_' only."
        )
    return name


def update_username(user, candidate) -> Profile:
    """
    Give the user's profile a new username.

    Fails with ValidationError, leaving the profile untouched, when the name
    is blank, malformed, or already held by another profile.
    """
    _require_user(user, "change your username")
    name = validate_username(candidate)

    profile = db.session.get(Profile, user.id)
    if profile is None:
        raise NotFound("Profile not found.")
    if profile.username == name:
        return profile

    taken = Profile.query.filter(Profile.username == name, Profile.id != user.id).first()
    if taken:
        raise ValidationError("Username already taken.")

    old = profile.username
    profile.username = name
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError("Username already taken.") from None
    except SQLAlchemyError as exc:
        db.session.rollback()
        log.exception("Username update failed for user %s", user.id)
        raise BackendError(GENERIC_FAILURE) from exc

    log.info("user %s renamed %r -> %r", user.id, old, name)
    return profile
