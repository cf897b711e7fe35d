from datetime import datetime, timezone
from flask_login import UserMixin
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError, VerificationError
from app.extensions import db

_ph = PasswordHasher()


class User(db.Model, UserMixin):
    """Auth identity.  The public display record lives in Profile (same id)."""
    __tablename__ = "users"

    id            = db.Column(db.Integer, primary_key=True)
    email         = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(512), nullable=False)
    is_active     = db.Column(db.Boolean, default=True, nullable=False)
    created_at    = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    last_login    = db.Column(db.DateTime, nullable=True)

    profile   = db.relationship("Profile", back_populates="user", uselist=False,
                                cascade="all, delete-orphan")
    posts     = db.relationship("Post", back_populates="author", lazy="dynamic")
    comments  = db.relationship("Comment", back_populates="author", lazy="dynamic")
    reactions = db.relationship("Reaction", back_populates="user", lazy="dynamic")

    # ── Password helpers ────────────────────────────────────────────────────
    def set_password(self, password: str) -> None:
        self.password_hash = _ph.hash(password)

    def check_password(self, password: str) -> bool:
        try:
            return _ph.verify(self.password_hash, password)
        except (VerifyMismatchError, InvalidHashError, VerificationError):
            return False

    # ── Display helpers ─────────────────────────────────────────────────────
    @property
    def username(self) -> str:
        return self.profile.username if self.profile else self.email.split("@")[0]

    def get_initials(self) -> str:
        return self.username[:2].upper()

    # Flask-Login requires this property
    @property
    def active(self) -> bool:
        return self.is_active

    def __repr__(self) -> str:
        return f"<User {self.email}>"
