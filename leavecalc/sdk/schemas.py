"""Pydantic schemas for leave-calc data validation.

All schemas use extra='forbid' to reject unknown fields, ensuring
typos in backup files cause clear errors rather than silent ignoring.

Older backups wrote camelCase keys (hireDate, employeeId, ...). Those are
accepted on input; everything is written back in snake_case.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .entitlement import parse_date

LeaveType = Literal["paid", "special", "other"]

# Categories from older backups mapped onto current ones
LEGACY_LEAVE_TYPES = {"unpaid": "other"}


def _canonical_date(value, field_name: str) -> str:
    """Normalize a date value to YYYY-MM-DD, raising ValueError if unparseable."""
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a YYYY-MM-DD string")
    try:
        return parse_date(value.strip()).isoformat()
    except ValueError:
        raise ValueError(f"{field_name} not in YYYY-MM-DD format: {value}")


class Employee(BaseModel):
    """An employee and an optional migrated baseline balance."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    department: Optional[str] = None
    hire_date: str = Field(
        ..., validation_alias=AliasChoices("hire_date", "hireDate"),
        description="Date of hire; anchors the accrual schedule",
    )
    baseline_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("baseline_date", "baselineDate"),
        description="Date at which baseline_days was the remaining balance",
    )
    baseline_days: Optional[float] = Field(
        default=None, ge=0, validation_alias=AliasChoices("baseline_days", "baselineDays"),
        description="Remaining days on baseline_date (legacy tracking)",
    )

    @field_validator("hire_date", mode="before")
    @classmethod
    def check_hire_date(cls, v):
        return _canonical_date(v, "hire_date")

    @field_validator("baseline_date", mode="before")
    @classmethod
    def check_baseline_date(cls, v):
        if v in (None, ""):
            return None
        return _canonical_date(v, "baseline_date")

    @property
    def has_baseline(self) -> bool:
        """Baseline applies only when both date and days are set."""
        return self.baseline_date is not None and self.baseline_days is not None


class LeaveRecord(BaseModel):
    """One leave usage event."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str = Field(..., min_length=1)
    employee_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("employee_id", "employeeId"),
    )
    date: str
    days: float = Field(..., ge=0, description="Days taken, in half-day steps")
    type: LeaveType = "paid"
    note: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, v):
        return _canonical_date(v, "date")

    @field_validator("days")
    @classmethod
    def check_half_days(cls, v: float) -> float:
        if (v * 2) % 1 != 0:
            raise ValueError(f"days must be a multiple of 0.5, got {v}")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def map_legacy_type(cls, v):
        if isinstance(v, str):
            return LEGACY_LEAVE_TYPES.get(v, v)
        return v


class Dataset(BaseModel):
    """Full export: every employee and every leave record."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    employees: List[Employee]
    records: List[LeaveRecord]
    export_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("export_date", "exportDate"),
    )

    @model_validator(mode="after")
    def check_references(self) -> "Dataset":
        """Ids are unique and every record belongs to a known employee."""
        errors = []

        employee_ids = [e.id for e in self.employees]
        dupes = sorted({i for i in employee_ids if employee_ids.count(i) > 1})
        if dupes:
            errors.append(f"duplicate employee id(s): {', '.join(dupes)}")

        record_ids = [r.id for r in self.records]
        dupes = sorted({i for i in record_ids if record_ids.count(i) > 1})
        if dupes:
            errors.append(f"duplicate record id(s): {', '.join(dupes)}")

        known = set(employee_ids)
        orphans = sorted({r.employee_id for r in self.records if r.employee_id not in known})
        if orphans:
            errors.append(f"records reference unknown employee id(s): {', '.join(orphans)}")

        if errors:
            raise ValueError("; ".join(errors))

        return self
