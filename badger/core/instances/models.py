# badger/core/instances/models.py

from __future__ import annotations

import re
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from badger.config import settings
from badger.core.badges.exceptions import InvalidArgument
from badger.core.badges.models import Badge
from badger.db.base import Base

EMAIL_RE = re.compile(
    r"[a-z0-9!#$%&'*+/=?^_`{|}~\-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~\-]+)*"
    r"@(?:[a-z0-9](?:[a-z0-9\-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9\-]*[a-z0-9])?",
    re.IGNORECASE,
)


def normalize_user(user: str | None) -> str:
    """Strip ``user`` and check it is an e-mail address."""
    user = (user or "").strip()
    if not EMAIL_RE.fullmatch(user):
        raise InvalidArgument(f"user must be an e-mail address, got {user!r}")
    return user


def user_badge_key(user: str, badge_id: str) -> str:
    return f"{user}.{badge_id}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BadgeInstance(Base):
    """
    One user's earned copy of one badge.

    ``user_badge_key`` is unique, so a user can hold a badge at most once.
    """
    __tablename__ = "badge_instances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    badge_id: Mapped[str] = mapped_column(String(32), ForeignKey("badges.id", ondelete="CASCADE"), nullable=False, index=True)
    assertion: Mapped[str] = mapped_column(Text, nullable=False)
    hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    issued_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    seen: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    user_badge_key: Mapped[str] = mapped_column(String(300), nullable=False, unique=True)

    badge: Mapped[Badge] = relationship(lazy="selectin")

    @validates("user")
    def _validate_user(self, key: str, value: str) -> str:
        return normalize_user(value)

    def relative_url(self, field: str) -> str:
        formats = {
            "assertion": "/badge/assertion/{}",
        }
        return formats[field].format(self.hash)

    def absolute_url(self, field: str) -> str:
        return settings.qualify_url(self.relative_url(field))

    def issued_on_unix(self) -> int:
        """``issued_on`` in whole seconds since the Unix epoch."""
        if not self.issued_on:
            return 0
        issued = self.issued_on
        if issued.tzinfo is None:
            # SQLite hands back naive datetimes
            issued = issued.replace(tzinfo=timezone.utc)
        return int(issued.timestamp())

    def __repr__(self) -> str:  # pragma: no cover
        return f"<BadgeInstance id={self.id} key={self.user_badge_key!r} seen={self.seen}>"


__all__ = ["BadgeInstance", "normalize_user", "user_badge_key", "EMAIL_RE"]
