from app.extensions import db

# Many-to-many association table: posts ↔ topics
post_topics = db.Table(
    "post_topics",
    db.Column(
        "post_id", db.Integer, db.ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "topic_id", db.Integer, db.ForeignKey("topics.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

# Seeded on start-up; the set is static reference data.
DEFAULT_TOPICS = [
    "Politics",
    "Technology",
    "Science",
    "Sports",
    "Culture",
    "Economy",
    "Environment",
    "Education",
]


class Topic(db.Model):
    """A named category used to tag and filter posts."""
    __tablename__ = "topics"

    id   = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)

    posts = db.relationship(
        "Post",
        secondary=post_topics,
        back_populates="topics",
        lazy="dynamic",
    )

    def __repr__(self) -> str:
        return f"<Topic {self.name!r}>"
