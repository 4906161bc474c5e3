"""Leave Calc MCP Server - FastMCP implementation for read-only leave tools."""

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from leavecalc.sdk import store as sdk_store
from leavecalc.sdk.entitlement import to_iso

logger = logging.getLogger(__name__)

mcp = FastMCP("leave-calc")


# --- Tools ---

@mcp.tool()
async def list_employees() -> dict[str, Any]:
    """List employees with id, name, department, hire date and baseline."""
    try:
        employees = sdk_store.list_employees()
        return {"employees": employees, "count": len(employees)}
    except Exception as e:
        logger.error(f"Error listing employees: {e}")
        return {"error": str(e), "employees": [], "count": 0}


@mcp.tool()
async def get_leave_status(
    employee_id: str = Field(description="Employee id (from list_employees)"),
    as_of: str | None = Field(default=None, description="Reporting date YYYY-MM-DD (default: today)"),
    include_expired: bool = Field(default=False, description="Also return expired grants"),
) -> dict[str, Any]:
    """Get an employee's paid-leave balance: active grants, remaining days, deficit, and annotated history."""
    try:
        if as_of:
            as_of = to_iso(as_of)
        status = sdk_store.get_leave_status(employee_id, as_of=as_of)
        data = status.to_dict()
        if not include_expired:
            data.pop("ledger")
        data["has_shortfall"] = status.has_shortfall
        return {"employee_id": employee_id, "status": data}

    except sdk_store.EmployeeNotFoundError as e:
        return {"error": str(e), "status": None}
    except ValueError as e:
        return {"error": f"Invalid as_of date: {e}", "status": None}
    except Exception as e:
        logger.error(f"Error computing leave status: {e}")
        return {"error": str(e), "status": None}


@mcp.tool()
async def list_leave_records(
    employee_id: str | None = Field(default=None, description="Only this employee's records"),
    month: str | None = Field(default=None, description="Only records in this month (YYYY-MM)"),
) -> dict[str, Any]:
    """List leave records sorted by date, optionally filtered by employee or month."""
    try:
        records = sdk_store.list_leave_records(employee_id=employee_id, month=month)
        return {"records": records, "count": len(records)}
    except Exception as e:
        logger.error(f"Error listing leave records: {e}")
        return {"error": str(e), "records": [], "count": 0}


# --- Resources ---

@mcp.resource("leavecalc://employees/balances")
async def balances_resource() -> str:
    """Current net balance for every employee."""
    try:
        balances = []
        for emp in sdk_store.list_employees():
            status = sdk_store.get_leave_status(emp["id"])
            balances.append({
                "id": emp["id"],
                "name": emp.get("name"),
                "remaining": status.remaining,
                "deficit": status.deficit,
                "net_balance": status.net_balance,
            })
        return json.dumps({"balances": balances}, indent=2, ensure_ascii=False)
    except Exception as e:
        return json.dumps({"error": str(e)})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
