# badger/core/badges/models.py

from __future__ import annotations

import base64
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON, Boolean, DateTime, ForeignKey, Integer, LargeBinary, String, Text, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from badger.config import settings
from badger.db.base import Base

from .exceptions import InvalidArgument
from .roles import BadgeRole, Capstone, role_from_columns, role_to_columns

MAX_NAME_LENGTH = 128
MAX_IMAGE_BYTES = 256 * 1024

TIME_TO_EARN = ("hours", "days", "weeks", "months", "years")
AGE_RANGES = ("0-13", "13-18", "19-24")
BADGE_TYPES = ("skill", "achievement", "participation")
ACTIVITY_TYPES = ("offline", "online")

_OPTIONAL_RE = re.compile(r"\(\s*optional\s*\)")


def generate_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_code(code: str) -> str:
    """' My Code ' -> 'my-code'"""
    return code.strip().replace(" ", "-").lower()


def slugify(text: str) -> str:
    """'Super Cool Badge!' -> 'super-cool-badge'"""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return slug.strip("-")


def parse_rubric_items(content: str) -> List[Dict[str, Any]]:
    """
    Turn criteria text into rubric items.

    Every line starting with ``*`` is an item; ``(optional)`` anywhere on the
    line makes it not required. Without any bullet lines the whole text
    becomes a single required item.
    """
    items: List[Dict[str, Any]] = []
    for line in content.split("\n"):
        line = line.strip()
        if line.startswith("*"):
            items.append({
                "text": line[1:].strip(),
                "required": not _OPTIONAL_RE.search(line),
            })
    if not items:
        items.append({
            "text": "Satisfies the following criteria:\n" + content,
            "required": True,
        })
    return items


class Behavior(Base):
    __tablename__ = "badge_behaviors"
    __table_args__ = (UniqueConstraint("badge_id", "shortname", name="uq_badge_behaviors_badge_shortname"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    badge_id: Mapped[str] = mapped_column(String(32), ForeignKey("badges.id", ondelete="CASCADE"), nullable=False, index=True)
    shortname: Mapped[str] = mapped_column(String(64), nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False)

    @validates("count")
    def _validate_count(self, key: str, value: int) -> int:
        if value is None or value < 0:
            raise InvalidArgument(f"behavior count must be >= 0, got {value!r}")
        return value

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Behavior {self.shortname}>={self.count}>"


class ClaimCode(Base):
    """
    One claim code of a badge.

    The unique index on ``code`` is the global code namespace: a code can
    belong to at most one badge.
    """
    __tablename__ = "claim_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    badge_id: Mapped[str] = mapped_column(String(32), ForeignKey("badges.id", ondelete="CASCADE"), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    claimed_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reserved_for: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    multi: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    badge: Mapped["Badge"] = relationship(back_populates="claim_codes")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<ClaimCode {self.code!r} claimed_by={self.claimed_by!r} multi={self.multi}>"


class Badge(Base):
    __tablename__ = "badges"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    shortname: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    criteria_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    criteria_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    program: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    do_not_list: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    image: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    category_award: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    category_requirement: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    category_weight: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    categories: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    time_to_earn: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    age_ranges: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    activity_type: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    prerequisites: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    behaviors: Mapped[List[Behavior]] = relationship(
        cascade="all, delete-orphan", lazy="selectin", order_by=Behavior.id
    )
    claim_codes: Mapped[List[ClaimCode]] = relationship(
        back_populates="badge", cascade="all, delete-orphan", lazy="selectin", order_by=ClaimCode.id
    )

    # --- validation ---

    @validates("name")
    def _validate_name(self, key: str, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise InvalidArgument("badge name is required")
        if len(value) > MAX_NAME_LENGTH:
            raise InvalidArgument(f"badge name must be at most {MAX_NAME_LENGTH} characters")
        return value

    @validates("image")
    def _validate_image(self, key: str, value: bytes) -> bytes:
        if value is not None and len(value) > MAX_IMAGE_BYTES:
            raise InvalidArgument(f"badge image must be at most {MAX_IMAGE_BYTES} bytes")
        return value

    @validates("time_to_earn", "type", "activity_type")
    def _validate_choice(self, key: str, value: Optional[str]) -> Optional[str]:
        choices = {"time_to_earn": TIME_TO_EARN, "type": BADGE_TYPES, "activity_type": ACTIVITY_TYPES}[key]
        if value is not None and value not in choices:
            raise InvalidArgument(f"{key} must be one of {choices}, got {value!r}")
        return value

    @validates("age_ranges")
    def _validate_age_ranges(self, key: str, value: List[str]) -> List[str]:
        bad = [v for v in value or [] if v not in AGE_RANGES]
        if bad:
            raise InvalidArgument(f"age_ranges must be within {AGE_RANGES}, got {bad!r}")
        return list(value or [])

    # --- category role ---

    @property
    def role(self) -> BadgeRole:
        return role_from_columns(self.category_award, self.category_requirement, self.category_weight)

    @role.setter
    def role(self, value: BadgeRole) -> None:
        self.category_award, self.category_requirement, self.category_weight = role_to_columns(value)
        if isinstance(value, Capstone):
            self.categories = []

    def normalize_category_info(self) -> None:
        """A capstone never counts toward categories; a contributor never has a requirement."""
        if self.category_award:
            self.categories = []
            self.category_weight = 0
        else:
            self.category_award = None
            self.category_requirement = 0

    # --- presentation helpers ---

    def image_data_uri(self) -> str:
        data = base64.b64encode(self.image).decode("ascii") if self.image else ""
        return f"data:image/png;base64,{data}"

    def relative_url(self, field: str) -> str:
        formats = {
            "criteria": "/badge/criteria/{}",
            "image": "/badge/image/{}.png",
            "json": "/badge/meta/{}",
        }
        return formats[field].format(self.shortname)

    def absolute_url(self, field: str) -> str:
        return settings.qualify_url(self.relative_url(field))

    def make_json(self) -> Dict[str, Any]:
        """Open Badges class metadata for this badge."""
        issuer = f"/program/meta/{self.program}" if self.program else "/issuer"
        return {
            "name": self.name,
            "description": self.description,
            "image": self.image_data_uri(),
            "criteria": self.absolute_url("criteria"),
            "issuer": settings.qualify_url(issuer),
            "tags": list(self.tags or []),
        }

    def rubric_items(self) -> List[Dict[str, Any]]:
        if not self.criteria_content:
            return []
        return parse_rubric_items(self.criteria_content)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Badge id={self.id} shortname={self.shortname!r}>"


__all__ = [
    "Badge", "Behavior", "ClaimCode", "generate_id", "normalize_code", "slugify", "parse_rubric_items",
    "MAX_NAME_LENGTH", "MAX_IMAGE_BYTES",
]
