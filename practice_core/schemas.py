"""
Pydantic models for plan documents.

These models define the structure of the Plan documents held by the plan
store. Dates are normalized into aware UTC datetimes on read (see
practice_core.instants), and documents are written back with camelCase
keys, the shape the rest of the product stores.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from practice_core.instants import to_instant


class UnitKind(str, Enum):
    """Kind of learning unit."""
    ITEM = "item"              # Vocabulary item
    STRUCTURE = "structure"    # Grammar structure


class SrsStatus(str, Enum):
    """Maturity label derived from the current interval."""
    LEARNING = "learning"
    LEARNED = "learned"
    MASTERED = "mastered"


class DocumentModel(BaseModel):
    """Shared config: camelCase aliases, population by field name too."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        extra="allow",
    )


# ---- Schedule State ----

class ScheduleState(DocumentModel):
    """
    Spaced-repetition bookkeeping for one unit.
    """
    interval: float = Field(default=0.0, ge=0, description="Days until the next review")
    due_date: Optional[datetime] = Field(default=None, description="Next review instant (UTC)")
    repetition: int = Field(default=0, ge=0, description="Consecutive passing reviews")
    ease_factor: float = Field(default=2.5, description="SM-2 ease factor")
    status: SrsStatus = SrsStatus.LEARNING

    @field_validator("due_date", mode="before")
    @classmethod
    def _normalize_due_date(cls, value: Any) -> Optional[datetime]:
        return to_instant(value)


# ---- Learning Unit ----

class LearningUnit(DocumentModel):
    """
    A vocabulary item or grammar structure tracked by the plan.

    A unit without a schedule has never been graded.
    """
    id: str
    kind: UnitKind = UnitKind.ITEM
    schedule: Optional[ScheduleState] = Field(default=None, alias="srsData")
    last_reviewed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("last_reviewed_at", "updated_at", mode="before")
    @classmethod
    def _normalize_dates(cls, value: Any) -> Optional[datetime]:
        return to_instant(value)


# ---- Lesson ----

class Lesson(DocumentModel):
    """
    A lesson within a plan; its items and structures form the Active-Lesson pool.
    """
    id: str
    title: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    items: list[LearningUnit] = Field(default_factory=list)
    structures: list[LearningUnit] = Field(default_factory=list)

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def _normalize_scheduled_date(cls, value: Any) -> Optional[datetime]:
        return to_instant(value)

    @field_validator("items", mode="after")
    @classmethod
    def _tag_items(cls, units: list[LearningUnit]) -> list[LearningUnit]:
        for unit in units:
            unit.kind = UnitKind.ITEM.value
        return units

    @field_validator("structures", mode="after")
    @classmethod
    def _tag_structures(cls, units: list[LearningUnit]) -> list[LearningUnit]:
        for unit in units:
            unit.kind = UnitKind.STRUCTURE.value
        return units


# ---- Plan ----

class Plan(DocumentModel):
    """
    Aggregate root: one plan per enrolled student.

    One document per plan. The Review-Queue and Mastered pools are maps
    keyed by unit id.
    """
    id: str = Field(..., alias="_id")
    student_id: Optional[str] = None
    status: Optional[str] = None
    lessons: list[Lesson] = Field(default_factory=list)
    review_queue: dict[str, LearningUnit] = Field(default_factory=dict)
    mastered: dict[str, LearningUnit] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @field_validator("updated_at", mode="before")
    @classmethod
    def _normalize_updated_at(cls, value: Any) -> Optional[datetime]:
        return to_instant(value)

    @field_validator("review_queue", "mastered", mode="before")
    @classmethod
    def _key_pool(cls, value: Any) -> Any:
        # Pools stored as lists of units are keyed by their ids
        if isinstance(value, list):
            return {_unit_id(unit): unit for unit in value}
        if isinstance(value, dict):
            return {key: _keyed_unit(key, unit) for key, unit in value.items()}
        return value or {}

    @classmethod
    def from_document(cls, document: dict) -> "Plan":
        return cls.model_validate(document)

    def to_document(self) -> dict:
        """Serialize for the plan store (camelCase keys, datetimes kept native)."""
        return self.model_dump(by_alias=True)


def _unit_id(unit: Any) -> Any:
    if isinstance(unit, LearningUnit):
        return unit.id
    return unit.get("id") if isinstance(unit, dict) else unit


def _keyed_unit(key: str, unit: Any) -> Any:
    """
    Pool entry under its map key. Entries stored without an id take the key;
    an entry whose id disagrees with its key is rejected.
    """
    if isinstance(unit, dict) and unit.get("id") is None:
        return {**unit, "id": key}
    unit_id = _unit_id(unit)
    if unit_id != key:
        raise ValueError(f"Pool entry {key!r} holds unit {unit_id!r}")
    return unit


# ---- Ephemeral input ----

class PracticeResult(DocumentModel):
    """
    One graded unit from a practice session.

    The grade is kept raw here; it is validated by the scheduling algorithm.
    """
    unit_id: str = Field(..., validation_alias=AliasChoices("unitId", "itemId", "unit_id"))
    grade: Any

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---- Session Progress ----

class SessionProgress(DocumentModel):
    """
    Saved state of an in-flight practice session, so it can be resumed.

    One document per plan; cleared once the session's grades are committed.
    """
    plan_id: str
    mode: Optional[str] = None
    current_index: int = Field(default=0, ge=0, description="Position of the next unit to practice")
    unit_ids: list[str] = Field(default_factory=list, description="Session units, in practice order")
    results: list[PracticeResult] = Field(default_factory=list, description="Grades collected so far")
    last_updated: Optional[datetime] = None

    @field_validator("last_updated", mode="before")
    @classmethod
    def _normalize_last_updated(cls, value: Any) -> Optional[datetime]:
        return to_instant(value)

    @classmethod
    def from_document(cls, document: dict) -> "SessionProgress":
        return cls.model_validate(document)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)
