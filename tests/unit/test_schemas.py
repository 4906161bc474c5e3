"""Tests for pydantic schemas (employees, leave records, backup datasets)."""

import pytest
from pydantic import ValidationError

from leavecalc.sdk.schemas import Dataset, Employee, LeaveRecord


def make_record(**overrides) -> dict:
    record = {
        "id": "rec00001",
        "employee_id": "emp00001",
        "date": "2024-05-01",
        "days": 1,
        "type": "paid",
    }
    record.update(overrides)
    return record


class TestEmployee:
    """Employee schema validation."""

    def test_minimal_employee(self):
        emp = Employee.model_validate({"id": "e1", "name": "Sato", "hire_date": "2020-04-01"})

        assert emp.hire_date == "2020-04-01"
        assert emp.department is None
        assert emp.has_baseline is False

    def test_camel_case_keys_accepted(self):
        emp = Employee.model_validate({
            "id": "e1",
            "name": "Sato",
            "hireDate": "2020-04-01",
            "baselineDate": "2023-01-01",
            "baselineDays": 12,
        })

        assert emp.baseline_date == "2023-01-01"
        assert emp.baseline_days == 12
        assert emp.has_baseline is True
        assert "hire_date" in emp.model_dump()

    def test_empty_baseline_date_is_none(self):
        emp = Employee.model_validate({
            "id": "e1", "name": "Sato", "hire_date": "2020-04-01", "baseline_date": "",
        })
        assert emp.baseline_date is None

    def test_partial_baseline_is_not_a_baseline(self):
        emp = Employee.model_validate({
            "id": "e1", "name": "Sato", "hire_date": "2020-04-01", "baseline_days": 5,
        })
        assert emp.has_baseline is False

    @pytest.mark.parametrize("hire_date", ["2020-13-01", "2021-02-29", "04/01/2020", "", 20200401])
    def test_invalid_hire_date_rejected(self, hire_date):
        with pytest.raises(ValidationError) as exc_info:
            Employee.model_validate({"id": "e1", "name": "Sato", "hire_date": hire_date})
        assert "hire_date" in str(exc_info.value)

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Employee.model_validate({"id": "e1", "name": "", "hire_date": "2020-04-01"})

    def test_negative_baseline_rejected(self):
        with pytest.raises(ValidationError):
            Employee.model_validate({
                "id": "e1", "name": "Sato", "hire_date": "2020-04-01",
                "baseline_date": "2023-01-01", "baseline_days": -1,
            })

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Employee.model_validate({
                "id": "e1", "name": "Sato", "hire_date": "2020-04-01", "salary": 100,
            })
        assert "salary" in str(exc_info.value)


class TestLeaveRecord:
    """LeaveRecord schema validation."""

    def test_defaults(self):
        data = make_record()
        del data["type"]

        record = LeaveRecord.model_validate(data)

        assert record.type == "paid"
        assert record.note is None

    @pytest.mark.parametrize("days", [0, 0.5, 1, 1.5, 20])
    def test_half_day_steps_accepted(self, days):
        assert LeaveRecord.model_validate(make_record(days=days)).days == days

    @pytest.mark.parametrize("days", [0.3, 1.25, -1, float("inf")])
    def test_invalid_days_rejected(self, days):
        with pytest.raises(ValidationError):
            LeaveRecord.model_validate(make_record(days=days))

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            LeaveRecord.model_validate(make_record(type="vacation"))

    def test_legacy_unpaid_maps_to_other(self):
        assert LeaveRecord.model_validate(make_record(type="unpaid")).type == "other"

    def test_camel_case_employee_id(self):
        data = make_record()
        data["employeeId"] = data.pop("employee_id")

        record = LeaveRecord.model_validate(data)

        assert record.employee_id == "emp00001"

    def test_date_normalized(self):
        assert LeaveRecord.model_validate(make_record(date=" 2024-05-01 ")).date == "2024-05-01"


class TestDataset:
    """Cross-reference checks on a full backup."""

    def _employee(self, emp_id: str) -> dict:
        return {"id": emp_id, "name": f"Name {emp_id}", "hire_date": "2020-04-01"}

    def test_valid_dataset(self):
        dataset = Dataset.model_validate({
            "employees": [self._employee("emp00001")],
            "records": [make_record()],
            "exportDate": "2025-01-01T09:00:00",
        })

        assert len(dataset.employees) == 1
        assert dataset.export_date == "2025-01-01T09:00:00"

    def test_orphan_record_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Dataset.model_validate({
                "employees": [self._employee("emp00001")],
                "records": [make_record(employee_id="ghost")],
            })
        assert "unknown employee id(s): ghost" in str(exc_info.value)

    def test_duplicate_ids_reported_together(self):
        with pytest.raises(ValidationError) as exc_info:
            Dataset.model_validate({
                "employees": [self._employee("emp00001"), self._employee("emp00001")],
                "records": [make_record(), make_record()],
            })
        message = str(exc_info.value)
        assert "duplicate employee id(s): emp00001" in message
        assert "duplicate record id(s): rec00001" in message
