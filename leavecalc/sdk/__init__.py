"""Leave Calc SDK - Core functionality for paid-leave tracking."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_output_format,
    get_data_path,
    SettingsError,
)

from .entitlement import (
    Grant,
    LeaveStatus,
    compute_leave_status,
    statutory_schedule,
    reconcile_baseline,
    replay_usage,
)

from .store import (
    JsonStore,
    get_store,
    ValidationError,
    EmployeeNotFoundError,
    RecordNotFoundError,
    list_employees,
    get_employee,
    add_employee,
    update_employee,
    set_baseline,
    clear_baseline,
    remove_employee,
    list_leave_records,
    add_leave_record,
    remove_leave_record,
    get_leave_status,
)

from .backup import (
    export_dataset,
    load_dataset,
    import_dataset,
    clear_all,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_output_format",
    "get_data_path",
    "SettingsError",
    # Engine
    "Grant",
    "LeaveStatus",
    "compute_leave_status",
    "statutory_schedule",
    "reconcile_baseline",
    "replay_usage",
    # Store
    "JsonStore",
    "get_store",
    "ValidationError",
    "EmployeeNotFoundError",
    "RecordNotFoundError",
    "list_employees",
    "get_employee",
    "add_employee",
    "update_employee",
    "set_baseline",
    "clear_baseline",
    "remove_employee",
    "list_leave_records",
    "add_leave_record",
    "remove_leave_record",
    "get_leave_status",
    # Backup
    "export_dataset",
    "load_dataset",
    "import_dataset",
    "clear_all",
]
