"""Debate models: Post, Comment, Reaction."""
import enum
from datetime import datetime, timezone
from app.extensions import db
from app.models.topic import post_topics


def _utcnow():
    return datetime.now(timezone.utc)


class ReactionType(enum.Enum):
    SUPPORT = "support"
    OPPOSE  = "oppose"

    @property
    def label(self) -> str:
        return "Support" if self is ReactionType.SUPPORT else "Oppose"


class Post(db.Model):
    """A debate prompt.

    support_count / oppose_count are a cache of the reaction set: they are
    recomputed from the Reaction rows in the same transaction as every
    reaction write (see debate_service.recount_reactions).
    """
    __tablename__ = "posts"

    id            = db.Column(db.Integer, primary_key=True)
    user_id       = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title         = db.Column(db.String(200), nullable=False)
    content       = db.Column(db.Text, nullable=False)
    support_count = db.Column(db.Integer, default=0, nullable=False)
    oppose_count  = db.Column(db.Integer, default=0, nullable=False)
    created_at    = db.Column(db.DateTime, default=_utcnow, nullable=False, index=True)

    author    = db.relationship("User", back_populates="posts")
    topics    = db.relationship("Topic", secondary=post_topics, back_populates="posts",
                                order_by="Topic.name")
    reactions = db.relationship("Reaction", back_populates="post", cascade="all, delete-orphan")
    comments  = db.relationship("Comment", back_populates="post", cascade="all, delete-orphan",
                                order_by="Comment.created_at")

    @property
    def reaction_total(self) -> int:
        return (self.support_count or 0) + (self.oppose_count or 0)

    def __repr__(self) -> str:
        return f"<Post {self.id} {self.title!r}>"


class Comment(db.Model):
    __tablename__ = "comments"

    id         = db.Column(db.Integer, primary_key=True)
    post_id    = db.Column(db.Integer, db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id    = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content    = db.Column(db.String(1000), nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)

    post   = db.relationship("Post", back_populates="comments")
    author = db.relationship("User", back_populates="comments")


class Reaction(db.Model):
    """A user's support/oppose vote on a post, at most one per (post, user)."""
    __tablename__ = "reactions"
    __table_args__ = (
        db.UniqueConstraint("post_id", "user_id", name="uq_reaction_post_user"),
    )

    id            = db.Column(db.Integer, primary_key=True)
    post_id       = db.Column(db.Integer, db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id       = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reaction_type = db.Column(
        db.Enum(ReactionType, name="reaction_type",
                values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    created_at    = db.Column(db.DateTime, default=_utcnow, nullable=False)

    post = db.relationship("Post", back_populates="reactions")
    user = db.relationship("User", back_populates="reactions")

    def __repr__(self) -> str:
        return f"<Reaction post={self.post_id} user={self.user_id} {self.reaction_type.value}>"
