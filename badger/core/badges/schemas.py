from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Base64Bytes, BaseModel, Field

from badger.core.instances.models import BadgeInstance

from .models import MAX_NAME_LENGTH, Badge
from .roles import BadgeRole, role_from_columns


class RoleFields(BaseModel):
    """Raw category columns; turned into a ``BadgeRole`` before use."""
    category_award: Optional[str] = Field(None, description="Category this badge caps")
    category_requirement: int = Field(0, ge=0, description="Score needed for the capstone")
    category_weight: int = Field(0, ge=0, description="Score this badge adds to its categories")

    def to_role(self) -> BadgeRole:
        return role_from_columns(self.category_award, self.category_requirement, self.category_weight)

    def touches_role(self) -> bool:
        return bool({"category_award", "category_requirement", "category_weight"} & self.model_fields_set)


class BadgeIn(RoleFields):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str
    image: Base64Bytes = Field(..., description="Base64 encoded PNG")
    shortname: Optional[str] = Field(None, description="Defaults to a slug of the name")
    criteria_content: Optional[str] = None
    criteria_url: Optional[str] = None
    program: Optional[str] = None
    do_not_list: bool = False
    tags: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    time_to_earn: Optional[str] = None
    age_ranges: List[str] = Field(default_factory=list)
    type: Optional[str] = None
    activity_type: Optional[str] = None
    prerequisites: List[str] = Field(default_factory=list)
    behaviors: Dict[str, int] = Field(default_factory=dict, description="behavior shortname -> required count")

    def badge_attrs(self) -> Dict[str, Any]:
        exclude = {"category_award", "category_requirement", "category_weight", "behaviors", "image"}
        attrs = self.model_dump(exclude=exclude)
        # model_dump re-encodes Base64Bytes; the column stores the decoded PNG
        attrs["image"] = self.image
        return attrs


class BadgeUpdate(RoleFields):
    """Partial update; only the fields sent are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: Optional[str] = None
    image: Optional[Base64Bytes] = None
    criteria_content: Optional[str] = None
    criteria_url: Optional[str] = None
    program: Optional[str] = None
    do_not_list: Optional[bool] = None
    tags: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    time_to_earn: Optional[str] = None
    age_ranges: Optional[List[str]] = None
    type: Optional[str] = None
    activity_type: Optional[str] = None
    prerequisites: Optional[List[str]] = None
    behaviors: Optional[Dict[str, int]] = None

    def badge_attrs(self) -> Dict[str, Any]:
        exclude = {"category_award", "category_requirement", "category_weight", "behaviors", "image"}
        attrs = self.model_dump(exclude_unset=True, exclude=exclude)
        if "image" in self.model_fields_set and self.image is not None:
            attrs["image"] = self.image
        return attrs


class BadgeOut(BaseModel):
    id: str
    shortname: str
    name: str
    description: str
    image_url: str
    criteria_url: Optional[str]
    program: Optional[str]
    do_not_list: bool
    tags: List[str]
    category_award: Optional[str]
    category_requirement: int
    category_weight: int
    categories: List[str]
    time_to_earn: Optional[str]
    age_ranges: List[str]
    type: Optional[str]
    activity_type: Optional[str]
    prerequisites: List[str]
    behaviors: Dict[str, int]
    created_at: datetime

    @classmethod
    def from_badge(cls, badge: Badge) -> "BadgeOut":
        return cls(
            id=badge.id,
            shortname=badge.shortname,
            name=badge.name,
            description=badge.description,
            image_url=badge.absolute_url("image"),
            criteria_url=badge.criteria_url or badge.absolute_url("criteria"),
            program=badge.program,
            do_not_list=badge.do_not_list,
            tags=list(badge.tags or []),
            category_award=badge.category_award,
            category_requirement=badge.category_requirement,
            category_weight=badge.category_weight,
            categories=list(badge.categories or []),
            time_to_earn=badge.time_to_earn,
            age_ranges=list(badge.age_ranges or []),
            type=badge.type,
            activity_type=badge.activity_type,
            prerequisites=list(badge.prerequisites or []),
            behaviors={b.shortname: b.count for b in badge.behaviors},
            created_at=badge.created_at,
        )


class CriteriaOut(BaseModel):
    shortname: str
    content: Optional[str]
    rubric_items: List[Dict[str, Any]]


class InstanceOut(BaseModel):
    badge: str = Field(..., description="Badge shortname")
    user: str
    hash: str
    issued_on: int = Field(..., description="Unix timestamp")
    seen: bool
    assertion_url: str

    @classmethod
    def from_instance(cls, instance: BadgeInstance) -> "InstanceOut":
        return cls(
            badge=instance.badge.shortname,
            user=instance.user,
            hash=instance.hash,
            issued_on=instance.issued_on_unix(),
            seen=instance.seen,
            assertion_url=instance.absolute_url("assertion"),
        )


class AwardIn(BaseModel):
    user: str
    send_email: bool = False


class AwardOut(BaseModel):
    awarded: bool = Field(..., description="False when the user already held the badge")
    instance: Optional[InstanceOut] = None
    cascaded: List[InstanceOut] = Field(default_factory=list)


class ReserveIn(BaseModel):
    user: str


class ReserveOut(BaseModel):
    code: Optional[str] = Field(None, description="None when the user already holds the badge")


# --- claim codes ---

class ClaimCodesIn(BaseModel):
    codes: List[str] = Field(..., min_length=1)
    limit: Optional[int] = Field(None, ge=0)
    multi: bool = False
    reserved_for: Optional[str] = None


class ClaimCodesAdded(BaseModel):
    accepted: List[str]
    rejected: List[str]


class GenerateIn(BaseModel):
    count: int = Field(1, ge=0, le=1000)
    reserved_for: Optional[str] = None


class GeneratedOut(BaseModel):
    codes: List[str]


class ClaimCodeOut(BaseModel):
    code: str
    claimed: bool
    reserved_for: Optional[str] = None


class ClaimIn(BaseModel):
    code: str = Field(..., min_length=1)
    user: str
    send_email: bool = False


__all__ = [
    "BadgeIn", "BadgeUpdate", "BadgeOut", "CriteriaOut", "InstanceOut",
    "AwardIn", "AwardOut", "ReserveIn", "ReserveOut",
    "ClaimCodesIn", "ClaimCodesAdded", "GenerateIn", "GeneratedOut", "ClaimCodeOut", "ClaimIn",
]
