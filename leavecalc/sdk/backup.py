"""Full-dataset export, import and reset.

A backup holds every employee and every leave record:

    {"employees": [...], "records": [...], "export_date": "<ISO timestamp>"}

Written as JSON by default, or YAML when the path ends in .yaml/.yml.
Import replaces all current data; nothing is merged.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import pydantic
import yaml

from .schemas import Dataset
from .store import (
    JsonStore,
    ValidationError,
    format_validation_errors,
    get_store,
    load_employees,
    load_records,
    save_employees,
    save_records,
    EMPLOYEES_KEY,
    RECORDS_KEY,
)

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def default_backup_name() -> str:
    """Backup filename for today, e.g. leave_backup_2025-04-01.json."""
    return f"leave_backup_{datetime.now().strftime('%Y-%m-%d')}.json"


def export_dataset(path: Optional[Path] = None, store: Optional[JsonStore] = None) -> Path:
    """Write every employee and record to a backup file.

    Args:
        path: Output file (default: leave_backup_<today>.json in the cwd)

    Returns:
        Path to the written file
    """
    store = store or get_store()
    path = Path(path) if path else Path.cwd() / default_backup_name()

    data = {
        "employees": load_employees(store),
        "records": load_records(store),
        "export_date": datetime.now().isoformat(),
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        if path.suffix.lower() in YAML_SUFFIXES:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        else:
            json.dump(data, f, indent=2, ensure_ascii=False)

    logger.debug(f"Exported {len(data['employees'])} employee(s), "
                 f"{len(data['records'])} record(s) to {path}")
    return path


def _read_backup(path: Path) -> Any:
    """Parse a backup file by suffix."""
    if not path.exists():
        raise ValidationError([f"file not found: {path}"])

    with open(path) as f:
        try:
            if path.suffix.lower() in YAML_SUFFIXES:
                return yaml.safe_load(f)
            return json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValidationError([f"cannot parse {path.name}: {e}"])


def load_dataset(path: Path) -> Dataset:
    """Read and validate a backup file without touching stored data.

    Raises:
        ValidationError: Listing every structural problem found
    """
    path = Path(path)
    raw = _read_backup(path)

    if not isinstance(raw, dict):
        raise ValidationError(["backup must be an object with 'employees' and 'records'"])

    errors = []
    for key in (EMPLOYEES_KEY, RECORDS_KEY):
        if not isinstance(raw.get(key), list):
            errors.append(f"missing '{key}' array")
    if errors:
        raise ValidationError(errors)

    try:
        return Dataset.model_validate(raw)
    except pydantic.ValidationError as e:
        raise ValidationError(format_validation_errors(e))


def import_dataset(path: Path, store: Optional[JsonStore] = None) -> Dict[str, int]:
    """Replace all stored data with the contents of a backup file.

    Validation runs first; on any error nothing is written.

    Returns:
        {"employees": n, "records": m} counts imported
    """
    store = store or get_store()
    dataset = load_dataset(path)

    employees = [e.model_dump() for e in dataset.employees]
    records = [r.model_dump() for r in dataset.records]

    save_employees(employees, store)
    save_records(records, store)

    logger.debug(f"Imported {len(employees)} employee(s), {len(records)} record(s) from {path}")
    return {"employees": len(employees), "records": len(records)}


def clear_all(store: Optional[JsonStore] = None) -> Tuple[int, int]:
    """Delete every employee and record.

    Returns:
        (employees_removed, records_removed)
    """
    store = store or get_store()
    counts = (len(load_employees(store)), len(load_records(store)))

    store.remove(EMPLOYEES_KEY)
    store.remove(RECORDS_KEY)

    logger.debug(f"Cleared {counts[0]} employee(s), {counts[1]} record(s)")
    return counts
