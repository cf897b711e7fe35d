# Import all models so SQLAlchemy can discover them for db.create_all()
# Order matters: association tables and FK targets must be imported before dependents.
from app.models.user import User
from app.models.profile import Profile
from app.models.topic import Topic, post_topics, DEFAULT_TOPICS
from app.models.debate import Post, Comment, Reaction, ReactionType

__all__ = [
    "User", "Profile",
    "Topic", "post_topics", "DEFAULT_TOPICS",
    "Post", "Comment", "Reaction", "ReactionType",
]
