"""
Employee and leave record storage.

This module contains all business logic for storing employees and leave
records. CLI and MCP tools should be thin wrappers that call these functions.

Design Rationale
----------------

Keyed store, whole-collection writes:
    Data lives in one JSON file per key (employees.json, records.json) in the
    data directory. Every mutation loads the collection, changes it, and saves
    it back. Collections are small (one office, a few years of leave), so
    there is no index and no partial update.

Injected store:
    Every function takes an optional `store`. When omitted, get_store() builds
    one from settings (data_dir) or the XDG default. Tests pass their own.

Validation at the boundary:
    Everything written goes through the pydantic schemas in schemas.py, so the
    entitlement engine only ever sees well-formed dates and day counts.
"""

import json
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pydantic

from .config import get_data_path
from .entitlement import LeaveStatus, compute_leave_status
from .schemas import Employee, LeaveRecord

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)

EMPLOYEES_KEY = "employees"
RECORDS_KEY = "records"
ID_LENGTH = 8


# =============================================================================
# ERRORS
# =============================================================================

class ValidationError(Exception):
    """Raised when data fails validation."""
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Validation failed: {'; '.join(errors)}")


class EmployeeNotFoundError(Exception):
    """Raised when an employee id does not exist."""
    pass


class RecordNotFoundError(Exception):
    """Raised when a leave record id does not exist."""
    pass


def format_validation_errors(exc: pydantic.ValidationError) -> List[str]:
    """Flatten a pydantic error into readable 'path: message' strings."""
    messages = []
    for err in exc.errors():
        path = ".".join(str(p) for p in err.get("loc", ())) or "root"
        msg = err.get("msg", "invalid")
        # pydantic prefixes custom ValueErrors
        msg = msg.replace("Value error, ", "")
        messages.append(f"{path}: {msg}")
    return messages


# =============================================================================
# STORAGE
# =============================================================================

class JsonStore:
    """Keyed JSON store: one file per key under base_dir."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def path_for(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def load(self, key: str, default: Any = None) -> Any:
        """Load the value stored under key (default if missing)."""
        path = self.path_for(key)
        if not path.exists():
            return default
        with open(path) as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError([f"{path} is not valid JSON: {e}"])

    def save(self, key: str, value: Any) -> Path:
        """Write value under key, replacing the previous content."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w") as f:
            json.dump(value, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)
        return path

    def remove(self, key: str) -> bool:
        """Delete the file for key. Returns True if it existed."""
        path = self.path_for(key)
        if path.exists():
            path.unlink()
            return True
        return False


def get_store() -> JsonStore:
    """Store rooted at the configured data directory."""
    return JsonStore(get_data_path())


def generate_id(existing: Optional[set] = None) -> str:
    """Generate an 8-char hex id not already in `existing`."""
    existing = existing or set()
    while True:
        new_id = uuid.uuid4().hex[:ID_LENGTH]
        if new_id not in existing:
            return new_id


def load_employees(store: Optional[JsonStore] = None) -> List[Dict[str, Any]]:
    store = store or get_store()
    return store.load(EMPLOYEES_KEY, [])


def save_employees(employees: List[Dict[str, Any]], store: Optional[JsonStore] = None) -> Path:
    store = store or get_store()
    return store.save(EMPLOYEES_KEY, employees)


def load_records(store: Optional[JsonStore] = None) -> List[Dict[str, Any]]:
    store = store or get_store()
    return store.load(RECORDS_KEY, [])


def save_records(records: List[Dict[str, Any]], store: Optional[JsonStore] = None) -> Path:
    store = store or get_store()
    return store.save(RECORDS_KEY, records)


# =============================================================================
# EMPLOYEES
# =============================================================================

def _validated_employee(data: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return Employee.model_validate(data).model_dump()
    except pydantic.ValidationError as e:
        raise ValidationError(format_validation_errors(e))


def list_employees(store: Optional[JsonStore] = None) -> List[Dict[str, Any]]:
    """All employees, in insertion order."""
    return load_employees(store)


def get_employee(employee_id: str, store: Optional[JsonStore] = None) -> Dict[str, Any]:
    """Get one employee by id.

    Raises:
        EmployeeNotFoundError: If no employee has that id
    """
    for employee in load_employees(store):
        if employee.get("id") == employee_id:
            return employee
    raise EmployeeNotFoundError(f"Employee '{employee_id}' not found")


def add_employee(
    name: str,
    hire_date: str,
    department: Optional[str] = None,
    store: Optional[JsonStore] = None,
) -> Dict[str, Any]:
    """Add an employee and return the stored dict (with its new id).

    Raises:
        ValidationError: If name or hire_date is invalid
    """
    store = store or get_store()
    employees = load_employees(store)

    employee = _validated_employee({
        "id": generate_id({e.get("id") for e in employees}),
        "name": name,
        "department": department or None,
        "hire_date": hire_date,
    })
    employees.append(employee)
    save_employees(employees, store)

    logger.debug(f"Added employee {employee['id']} ({employee['name']})")
    return employee


def update_employee(employee_id: str, store: Optional[JsonStore] = None,
                    **changes) -> Dict[str, Any]:
    """Apply field changes to an employee and return the updated dict.

    Raises:
        EmployeeNotFoundError: If no employee has that id
        ValidationError: If the result is invalid
    """
    store = store or get_store()
    employees = load_employees(store)

    for idx, employee in enumerate(employees):
        if employee.get("id") == employee_id:
            updated = _validated_employee({**employee, **changes, "id": employee_id})
            employees[idx] = updated
            save_employees(employees, store)
            logger.debug(f"Updated employee {employee_id}: {', '.join(sorted(changes))}")
            return updated

    raise EmployeeNotFoundError(f"Employee '{employee_id}' not found")


def set_baseline(employee_id: str, baseline_date: str, baseline_days: float,
                 store: Optional[JsonStore] = None) -> Dict[str, Any]:
    """Record a migrated balance: `baseline_days` remaining on `baseline_date`."""
    return update_employee(
        employee_id, store=store,
        baseline_date=baseline_date, baseline_days=baseline_days,
    )


def clear_baseline(employee_id: str, store: Optional[JsonStore] = None) -> Dict[str, Any]:
    """Remove the baseline so the balance is computed from the hire date."""
    return update_employee(
        employee_id, store=store,
        baseline_date=None, baseline_days=None,
    )


def remove_employee(employee_id: str, store: Optional[JsonStore] = None) -> int:
    """Delete an employee and all of their leave records.

    Returns:
        Number of leave records removed with the employee

    Raises:
        EmployeeNotFoundError: If no employee has that id
    """
    store = store or get_store()
    employees = load_employees(store)

    remaining = [e for e in employees if e.get("id") != employee_id]
    if len(remaining) == len(employees):
        raise EmployeeNotFoundError(f"Employee '{employee_id}' not found")

    records = load_records(store)
    kept = [r for r in records if r.get("employee_id") != employee_id]

    save_employees(remaining, store)
    save_records(kept, store)

    removed = len(records) - len(kept)
    logger.debug(f"Removed employee {employee_id} and {removed} record(s)")
    return removed


# =============================================================================
# LEAVE RECORDS
# =============================================================================

def list_leave_records(
    employee_id: Optional[str] = None,
    month: Optional[str] = None,
    store: Optional[JsonStore] = None,
) -> List[Dict[str, Any]]:
    """List leave records with optional filters.

    Args:
        employee_id: Only this employee's records
        month: Only records in this month ("YYYY-MM")

    Returns:
        Records sorted by date (stable, so same-day records keep entry order)
    """
    results = load_records(store)

    if employee_id:
        results = [r for r in results if r.get("employee_id") == employee_id]
    if month:
        results = [r for r in results if r.get("date", "").startswith(f"{month}-")]

    return sorted(results, key=lambda r: r.get("date", ""))


def add_leave_record(
    employee_id: str,
    date: str,
    days: float,
    type: str = "paid",
    note: Optional[str] = None,
    store: Optional[JsonStore] = None,
) -> Dict[str, Any]:
    """Record leave taken by an employee.

    Overlapping or duplicate records are allowed; each one counts.

    Raises:
        EmployeeNotFoundError: If the employee doesn't exist
        ValidationError: If date, days or type is invalid
    """
    store = store or get_store()
    get_employee(employee_id, store)

    records = load_records(store)
    try:
        record = LeaveRecord.model_validate({
            "id": generate_id({r.get("id") for r in records}),
            "employee_id": employee_id,
            "date": date,
            "days": days,
            "type": type,
            "note": note or None,
        }).model_dump()
    except pydantic.ValidationError as e:
        raise ValidationError(format_validation_errors(e))

    records.append(record)
    save_records(records, store)

    logger.debug(f"Added {record['type']} leave {record['id']} for {employee_id}: "
                f"{record['days']} day(s) on {record['date']}")
    return record


def remove_leave_record(record_id: str, store: Optional[JsonStore] = None) -> Dict[str, Any]:
    """Delete a leave record and return it.

    Raises:
        RecordNotFoundError: If no record has that id
    """
    store = store or get_store()
    records = load_records(store)

    for idx, record in enumerate(records):
        if record.get("id") == record_id:
            del records[idx]
            save_records(records, store)
            logger.debug(f"Removed leave record {record_id}")
            return record

    raise RecordNotFoundError(f"Leave record '{record_id}' not found")


# =============================================================================
# STATUS
# =============================================================================

def get_leave_status(
    employee_id: str,
    as_of: Optional[str] = None,
    store: Optional[JsonStore] = None,
) -> LeaveStatus:
    """Compute an employee's leave status from stored data.

    Args:
        employee_id: Employee to report on
        as_of: Reporting date (YYYY-MM-DD). Defaults to today.

    Raises:
        EmployeeNotFoundError: If the employee doesn't exist
    """
    store = store or get_store()
    employee = get_employee(employee_id, store)
    records = list_leave_records(employee_id=employee_id, store=store)

    if as_of is None:
        as_of = datetime.now().strftime("%Y-%m-%d")

    return compute_leave_status(employee, records, as_of)
