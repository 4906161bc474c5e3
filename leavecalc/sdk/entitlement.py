"""
Paid-leave entitlement engine.

Replays an employee's leave usage against the statutory accrual schedule
and reports the balance as of a given date. This module is pure: no
storage, no clock, no global state. Callers load data, resolve "today",
and pass everything in.

Design Rationale
----------------

Why every call is a full replay:
    Inserting or deleting a usage record anywhere in the timeline can move
    deficit attribution for every later record. There is no cache and no
    incremental update; grants are rebuilt from the hire date each time.

Why usage draws only from grants valid on the usage date:
    A grant is valid on [grant.date, grant.expiry_date). Usage taken in 2021
    can only have come out of grants that existed and had not expired in
    2021, regardless of what is valid "now". Dates are YYYY-MM-DD strings so
    window checks are plain string comparisons.

Why consumption is FIFO but baseline reconciliation is LIFO:
    Consumption draws from the oldest valid grant first because it expires
    soonest (use it before you lose it). A baseline says "N days were left on
    this date" without saying which grants they belong to; the newest grants
    are the most plausible owners, so reconciliation fills grants newest
    first and treats older ones as used up. Whatever the grants valid on the
    baseline date cannot hold becomes a single overflow grant dated at the
    baseline.

Known quirk (kept on purpose):
    When the baseline date equals a statutory accrual date and the baseline
    overflows, the statutory grant and the overflow grant share a date and
    are summed, not merged.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

# Statutory schedule: 10 days six months after hire, then one grant every
# twelve months following the table below, 20 days once the table runs out.
FIRST_GRANT_MONTHS = 6
FIRST_GRANT_DAYS = 10
ANNUAL_GRANT_DAYS = (11, 12, 14, 16, 18, 20)
MAX_GRANT_DAYS = 20
MAX_MILESTONES = 40

VALIDITY_YEARS = 2

PAID = "paid"


def parse_date(value) -> date:
    """Parse a YYYY-MM-DD string (dates pass through unchanged)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, DATE_FORMAT).date()


def to_iso(value) -> str:
    """Canonical YYYY-MM-DD form of a date or date string."""
    return parse_date(value).isoformat()


def add_months(value, months: int) -> str:
    """Add calendar months, clamping to the last day of a short month."""
    return (parse_date(value) + relativedelta(months=months)).isoformat()


def expiry_for(grant_date) -> str:
    """Expiry of a grant accrued on grant_date (two calendar years later)."""
    return (parse_date(grant_date) + relativedelta(years=VALIDITY_YEARS)).isoformat()


def grant_days_for(milestone: int) -> int:
    """Days granted at a milestone (0 = six months after hire)."""
    if milestone == 0:
        return FIRST_GRANT_DAYS
    if milestone <= len(ANNUAL_GRANT_DAYS):
        return ANNUAL_GRANT_DAYS[milestone - 1]
    return MAX_GRANT_DAYS


@dataclass
class Grant:
    """A block of entitlement available from `date` until `expiry_date`."""

    date: str
    days: float
    expiry_date: str
    is_baseline: bool = False
    remaining: Optional[float] = None

    def __post_init__(self):
        if self.remaining is None:
            self.remaining = self.days

    def is_valid_on(self, day: str) -> bool:
        """Inclusive of the accrual date, exclusive of the expiry date."""
        return self.date <= day < self.expiry_date

    def draw(self, amount: float) -> float:
        """Deduct up to `amount` and return what was actually deducted."""
        taken = min(self.remaining, amount)
        self.remaining -= taken
        return taken

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "days": self.days,
            "remaining": self.remaining,
            "is_baseline": self.is_baseline,
            "expiry_date": self.expiry_date,
        }


@dataclass
class LeaveStatus:
    """Balance of one employee as of a reporting date."""

    as_of: str
    total_granted: float
    total_used: float
    remaining: float
    deficit: float
    grants: List[Grant]  # active on as_of, oldest first
    history: List[Dict[str, Any]]  # newest first, each with deficit_days
    ledger: List[Grant]  # every grant after replay, expired ones included

    @property
    def net_balance(self) -> float:
        """Remaining balance minus unfunded usage."""
        return self.remaining - self.deficit

    @property
    def has_shortfall(self) -> bool:
        return self.net_balance < 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "as_of": self.as_of,
            "total_granted": self.total_granted,
            "total_used": self.total_used,
            "remaining": self.remaining,
            "deficit": self.deficit,
            "net_balance": self.net_balance,
            "grants": [g.to_dict() for g in self.grants],
            "history": [dict(entry) for entry in self.history],
            "ledger": [g.to_dict() for g in self.ledger],
        }


def statutory_schedule(hire_date, as_of) -> List[Grant]:
    """Generate statutory grants accrued on or before `as_of`.

    Each milestone is computed from the hire date directly so month-end
    clamping never accumulates (hire 2019-08-31 -> 2020-02-29, 2021-02-28,
    2022-02-28, ...).

    Args:
        hire_date: Hire date (YYYY-MM-DD or date)
        as_of: Reporting date; milestones after it do not exist yet

    Returns:
        Grants ordered by accrual date ascending.
    """
    as_of = to_iso(as_of)
    grants: List[Grant] = []

    for milestone in range(MAX_MILESTONES):
        grant_date = add_months(hire_date, FIRST_GRANT_MONTHS + milestone * 12)
        if grant_date > as_of:
            break
        grants.append(Grant(
            date=grant_date,
            days=grant_days_for(milestone),
            expiry_date=expiry_for(grant_date),
        ))

    logger.debug(f"Generated {len(grants)} statutory grant(s) from {to_iso(hire_date)} to {as_of}")
    return grants


def reconcile_baseline(grants: List[Grant], baseline_date: str,
                       baseline_days: float) -> Optional[Grant]:
    """Fit a migrated balance onto the grants that existed on baseline_date.

    Walks grants newest first. Grants valid on the baseline date absorb the
    balance up to their size; once it is used up, older valid grants are
    zeroed. Grants already expired on the baseline date are zeroed. Grants
    accrued after the baseline date are left alone.

    Mutates `grants` in place.

    Returns:
        An overflow grant dated at the baseline for whatever the valid grants
        could not hold, or None.
    """
    left = max(float(baseline_days), 0.0)

    for grant in sorted(grants, key=lambda g: g.date, reverse=True):
        if grant.date > baseline_date:
            continue
        if grant.expiry_date <= baseline_date:
            grant.remaining = 0
            continue
        taken = min(grant.days, left)
        grant.remaining = taken
        left -= taken

    if left > 0:
        logger.debug(f"Baseline {baseline_date} overflows valid grants by {left} day(s)")
        return Grant(
            date=baseline_date,
            days=left,
            expiry_date=expiry_for(baseline_date),
            is_baseline=True,
        )
    return None


def replay_usage(
    grants: List[Grant],
    records: List[Dict[str, Any]],
    baseline_date: Optional[str] = None,
) -> Tuple[List[Dict[str, Any]], float]:
    """Allocate paid usage against grants in date order.

    Paid records on or after the baseline date draw from grants valid on the
    record's date, oldest grant first. Whatever cannot be covered is that
    record's deficit. Other records (non-paid, or paid before the baseline)
    pass through with a deficit of 0.

    Mutates `remaining` on `grants`; never mutates `records`.

    Returns:
        (history, total_deficit): history is newest first, each entry a copy
        of the record plus "deficit_days".
    """
    ordered_grants = sorted(grants, key=lambda g: g.date)
    history: List[Dict[str, Any]] = []
    total_deficit = 0.0

    for record in sorted(records, key=_record_day):
        day = _record_day(record)
        deficit_days = 0.0

        settled = baseline_date is not None and day < baseline_date
        if record.get("type") == PAID and not settled:
            needed = float(record.get("days") or 0)
            for grant in ordered_grants:
                if needed <= 0:
                    break
                if grant.remaining > 0 and grant.is_valid_on(day):
                    needed -= grant.draw(needed)
            deficit_days = needed
            total_deficit += needed
            if needed > 0:
                logger.debug(f"Usage on {day} short by {needed} day(s)")

        entry = dict(record)
        entry["deficit_days"] = deficit_days
        history.append(entry)

    history.sort(key=_record_day, reverse=True)
    return history, total_deficit


def compute_leave_status(
    employee: Dict[str, Any],
    records: List[Dict[str, Any]],
    as_of,
) -> LeaveStatus:
    """Compute an employee's leave status as of a date.

    Args:
        employee: Dict with "hire_date" and optional "baseline_date" /
                  "baseline_days" (both required for a baseline to apply)
        records: The employee's usage records (dicts with "date", "days",
                 "type" and any other fields, which are carried into history)
        as_of: Reporting date. Required; resolving "today" is the caller's job.

    Returns:
        LeaveStatus with totals over grants still active on as_of.
    """
    as_of = to_iso(as_of)
    grants = statutory_schedule(employee["hire_date"], as_of)

    baseline = get_baseline(employee)
    baseline_date = None
    if baseline:
        baseline_date, baseline_days = baseline
        overflow = reconcile_baseline(grants, baseline_date, baseline_days)
        if overflow:
            grants.append(overflow)

    history, deficit = replay_usage(grants, records, baseline_date)

    ledger = sorted(grants, key=lambda g: g.date)
    active = [g for g in ledger if g.expiry_date > as_of]

    total_granted = sum(g.days for g in active)
    remaining = sum(g.remaining for g in active)

    return LeaveStatus(
        as_of=as_of,
        total_granted=total_granted,
        total_used=total_granted - remaining,
        remaining=remaining,
        deficit=deficit,
        grants=[replace(g) for g in active],
        history=history,
        ledger=[replace(g) for g in ledger],
    )


def get_baseline(employee: Dict[str, Any]) -> Optional[Tuple[str, float]]:
    """Return (baseline_date, baseline_days), or None unless both are set."""
    baseline_date = employee.get("baseline_date")
    baseline_days = employee.get("baseline_days")
    if not baseline_date or baseline_days is None:
        return None
    return to_iso(baseline_date), float(baseline_days)


def _record_day(record: Dict[str, Any]) -> str:
    day = record.get("date", "")
    if isinstance(day, date):
        return to_iso(day)
    return day
