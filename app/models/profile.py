from datetime import datetime, timezone
from app.extensions import db


class Profile(db.Model):
    """Public display record for a user.

    The primary key *is* the user's id, so there is exactly one profile per
    account.  username is unique across all profiles; the unique index is
    what settles two people claiming the same name at the same moment.
    """
    __tablename__ = "profiles"

    id         = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    username   = db.Column(db.String(64), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    user = db.relationship("User", back_populates="profile")

    def __repr__(self) -> str:
        return f"<Profile {self.username}>"
