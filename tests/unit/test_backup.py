"""Tests for dataset export, import and reset."""

import json

import pytest
import yaml

from leavecalc.sdk import backup
from leavecalc.sdk import store as sdk_store
from leavecalc.sdk.store import JsonStore, ValidationError


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "data")


@pytest.fixture
def populated(store):
    """Store holding two employees and three records."""
    sato = sdk_store.add_employee("Sato Hana", "2020-01-01", department="Sales", store=store)
    kato = sdk_store.add_employee("Kato Ren", "2015-01-01", store=store)
    sdk_store.set_baseline(kato["id"], "2023-01-01", 12, store=store)
    sdk_store.add_leave_record(sato["id"], "2020-08-01", 1, store=store)
    sdk_store.add_leave_record(sato["id"], "2020-08-02", 0.5, type="special", store=store)
    sdk_store.add_leave_record(kato["id"], "2023-02-01", 3, note="trip", store=store)
    return store


class TestExport:
    """Writing backups."""

    def test_export_json(self, populated, tmp_path):
        out = backup.export_dataset(tmp_path / "backup.json", store=populated)

        data = json.loads(out.read_text())
        assert len(data["employees"]) == 2
        assert len(data["records"]) == 3
        assert "export_date" in data

    def test_export_yaml_by_suffix(self, populated, tmp_path):
        out = backup.export_dataset(tmp_path / "backup.yaml", store=populated)

        data = yaml.safe_load(out.read_text())
        assert [e["name"] for e in data["employees"]] == ["Sato Hana", "Kato Ren"]

    def test_default_name_in_cwd(self, populated, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        out = backup.export_dataset(store=populated)

        assert out.parent == tmp_path
        assert out.name.startswith("leave_backup_")
        assert out.suffix == ".json"

    def test_export_empty_store(self, store, tmp_path):
        out = backup.export_dataset(tmp_path / "empty.json", store=store)

        data = json.loads(out.read_text())
        assert data["employees"] == []
        assert data["records"] == []


class TestImport:
    """Restoring backups."""

    def test_import_replaces_existing(self, populated, tmp_path, store):
        path = backup.export_dataset(tmp_path / "backup.yml", store=populated)
        target = JsonStore(tmp_path / "other")
        sdk_store.add_employee("Leftover", "2019-01-01", store=target)

        counts = backup.import_dataset(path, store=target)

        assert counts == {"employees": 2, "records": 3}
        names = [e["name"] for e in sdk_store.list_employees(store=target)]
        assert names == ["Sato Hana", "Kato Ren"]

    def test_imported_data_gives_same_status(self, populated, tmp_path):
        path = backup.export_dataset(tmp_path / "backup.json", store=populated)
        target = JsonStore(tmp_path / "other")
        backup.import_dataset(path, store=target)

        for emp in sdk_store.list_employees(store=populated):
            before = sdk_store.get_leave_status(emp["id"], as_of="2023-06-01", store=populated)
            after = sdk_store.get_leave_status(emp["id"], as_of="2023-06-01", store=target)
            assert before.to_dict() == after.to_dict()

    def test_import_camel_case_backup(self, tmp_path, store):
        path = tmp_path / "legacy.json"
        path.write_text(json.dumps({
            "employees": [{
                "id": "e1", "name": "Sato", "hireDate": "2020-01-01",
                "baselineDate": "2023-01-01", "baselineDays": 4,
            }],
            "records": [
                {"id": "r1", "employeeId": "e1", "date": "2023-02-01", "days": 1, "type": "unpaid"},
            ],
            "exportDate": "2024-03-01T10:00:00.000Z",
        }))

        backup.import_dataset(path, store=store)

        emp = sdk_store.get_employee("e1", store=store)
        assert emp["hire_date"] == "2020-01-01"
        assert emp["baseline_days"] == 4
        record = sdk_store.list_leave_records(store=store)[0]
        assert record["employee_id"] == "e1"
        assert record["type"] == "other"

    def test_missing_arrays_rejected(self, tmp_path, store):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"employees": []}))

        with pytest.raises(ValidationError) as exc_info:
            backup.import_dataset(path, store=store)

        assert exc_info.value.errors == ["missing 'records' array"]
        assert not store.path_for("employees").exists()

    def test_invalid_record_leaves_data_untouched(self, populated, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({
            "employees": [{"id": "e1", "name": "Sato", "hire_date": "2020-01-01"}],
            "records": [{"id": "r1", "employee_id": "e1", "date": "2020-08-01", "days": 0.3}],
        }))

        with pytest.raises(ValidationError) as exc_info:
            backup.import_dataset(path, store=populated)

        assert any("records.0.days" in e for e in exc_info.value.errors)
        assert len(sdk_store.list_employees(store=populated)) == 2

    def test_orphan_records_rejected(self, tmp_path, store):
        path = tmp_path / "orphans.json"
        path.write_text(json.dumps({
            "employees": [],
            "records": [{"id": "r1", "employee_id": "ghost", "date": "2020-08-01", "days": 1}],
        }))

        with pytest.raises(ValidationError) as exc_info:
            backup.load_dataset(path)
        assert "ghost" in str(exc_info.value)

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("employees: [unclosed\n")

        with pytest.raises(ValidationError) as exc_info:
            backup.load_dataset(path)
        assert "cannot parse broken.yaml" in str(exc_info.value)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")

        with pytest.raises(ValidationError):
            backup.load_dataset(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError) as exc_info:
            backup.load_dataset(tmp_path / "nope.json")
        assert "file not found" in str(exc_info.value)


class TestClearAll:

    def test_clear_all(self, populated):
        assert backup.clear_all(store=populated) == (2, 3)
        assert sdk_store.list_employees(store=populated) == []
        assert sdk_store.list_leave_records(store=populated) == []

    def test_clear_empty(self, store):
        assert backup.clear_all(store=store) == (0, 0)
