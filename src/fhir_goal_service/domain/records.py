"""
Typed care plan goal records.

Goals are stored as detail rows of a care plan form. The storage layer hands
them over as loosely typed mappings; these models resolve missing keys to
defaults once, at construction time, so the mapper never has to.
"""
import datetime
from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


def _coerce_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value)


class GoalDetail(BaseModel):
    """One goal row of a care plan."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    date: Optional[str] = None
    description: Optional[str] = None
    code: Optional[str] = None
    codetext: Optional[str] = None

    @field_validator("date", "description", "code", "codetext", mode="before")
    @classmethod
    def _to_text(cls, v: Any) -> Optional[str]:
        return _coerce_text(v)


class CarePlanRecord(BaseModel):
    """A care plan record carrying the goal details of a single goal resource."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    uuid: Optional[str] = None
    puuid: Optional[str] = None
    details: Tuple[GoalDetail, ...] = ()

    @field_validator("uuid", "puuid", mode="before")
    @classmethod
    def _to_text(cls, v: Any) -> Optional[str]:
        return _coerce_text(v)

    @field_validator("details", mode="before")
    @classmethod
    def _default_details(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, Mapping):
            # A single detail row stored without its list wrapper
            return (v,)
        if not isinstance(v, (list, tuple)):
            return ()
        # Unreadable rows still count as a goal target, just an empty one
        return tuple(d if isinstance(d, (Mapping, GoalDetail)) else {} for d in v)

    @classmethod
    def from_record(cls, record: "Mapping[str, Any] | CarePlanRecord") -> "CarePlanRecord":
        """Build a record from a storage row, passing through existing instances."""
        if isinstance(record, cls):
            return record
        return cls.model_validate(dict(record))
