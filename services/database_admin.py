# services/database_admin.py

"""
Operations console behind POST /database-management.

Generic CRUD is limited to ALLOWED_TABLES. Schema changes (ALTER TABLE /
ALTER TYPE) go through the `exec_sql` Postgres function with identifiers
checked against IDENTIFIER_RE first. Every write is recorded in activity_log.
"""

import re
from typing import Callable, Dict, Optional

from fastapi import HTTPException

from core.errors import supabase_error
from core.logging_config import logger
from core.supabase_helpers import log_activity
from core.utils import page_range, sanitize, total_pages, utcnow
from models.database_admin import DatabaseAction, DatabaseRequest


ALLOWED_TABLES = [
    "profiles", "organizations", "properties", "units", "tenants",
    "invoices", "payments", "maintenance_tickets", "expenses",
    "activity_log", "user_roles", "tenant_documents", "ticket_comments",
    "notifications", "user_permissions", "tenants_profile",
    "tenant_bills", "tenant_family_members", "tenant_payment_records", "tenant_rooms",
]

VALID_COLUMN_TYPES = [
    "text", "integer", "bigint", "numeric", "boolean", "uuid",
    "date", "timestamp with time zone", "jsonb", "json",
]

PROTECTED_COLUMNS = ["id", "created_at", "updated_at", "organization_id", "user_id"]

KNOWN_ENUMS = [
    {
        "name": "app_role",
        "values": ["admin", "manager", "super_admin", "tenant", "staff", "guest", "user"],
    },
]

IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
ENUM_VALUE_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_ ]*$")

# Used for audit rows written outside any organization
SYSTEM_ORGANIZATION_ID = "00000000-0000-0000-0000-000000000000"


# ============================================================
# Validation
# ============================================================
def validate_table(table: Optional[str]) -> str:
    if not table:
        raise HTTPException(400, "table is required")
    if table not in ALLOWED_TABLES:
        raise HTTPException(400, f"Table '{table}' is not allowed")
    return table


def sanitize_identifier(name: Optional[str]) -> str:
    if not name or not IDENTIFIER_RE.match(name):
        raise HTTPException(400, f"Invalid identifier: {name}")
    return name


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _require(value, field: str):
    if value in (None, "", {}):
        raise HTTPException(400, f"{field} is required")
    return value


class DatabaseConsole:
    """One console session: a Supabase client plus the acting super admin."""

    def __init__(self, client, user_id: str, organization_id: Optional[str] = None):
        self.client = client
        self.user_id = user_id
        self.organization_id = organization_id or SYSTEM_ORGANIZATION_ID

        self.handlers: Dict[str, Callable[[DatabaseRequest], dict]] = {
            DatabaseAction.list_tables.value: self.list_tables,
            DatabaseAction.get_table_schema.value: self.get_table_schema,
            DatabaseAction.get_table_data.value: self.get_table_data,
            DatabaseAction.insert_row.value: self.insert_row,
            DatabaseAction.update_row.value: self.update_row,
            DatabaseAction.delete_row.value: self.delete_row,
            DatabaseAction.add_column.value: self.add_column,
            DatabaseAction.delete_column.value: self.delete_column,
            DatabaseAction.list_enums.value: self.list_enums,
            DatabaseAction.add_enum_value.value: self.add_enum_value,
            DatabaseAction.get_audit_log.value: self.get_audit_log,
            DatabaseAction.database_health.value: self.database_health,
        }

    # -----------------------------------------------------
    # Dispatch
    # -----------------------------------------------------
    def dispatch(self, request: DatabaseRequest) -> dict:
        handler = self.handlers.get(request.action)
        if handler is None:
            raise HTTPException(400, f"Unknown action: {request.action}")
        return handler(request)

    def audit(self, action: str, entity_type: str, entity_id: Optional[str], details: dict):
        log_activity(
            self.client,
            user_id=self.user_id,
            organization_id=self.organization_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )

    def _count(self, table: str) -> int:
        try:
            result = self.client.table(table).select("id", count="exact").limit(1).execute()
        except Exception as e:
            logger.warning(f"Row count failed for {table}: {e}")
            return 0
        return result.count or 0

    def _exec_sql(self, sql: str, operation: str):
        try:
            self.client.rpc("exec_sql", {"sql": sql}).execute()
        except Exception as e:
            supabase_error(e, operation)

    # -----------------------------------------------------
    # Introspection
    # -----------------------------------------------------
    def list_tables(self, request: DatabaseRequest) -> dict:
        try:
            data = self.client.rpc("get_table_info", {}).execute().data
            if data:
                return {"tables": data}
        except Exception as e:
            logger.info(f"get_table_info unavailable, counting rows instead: {e}")

        return {"tables": [{"name": t, "row_count": self._count(t)} for t in ALLOWED_TABLES]}

    def get_table_schema(self, request: DatabaseRequest) -> dict:
        table = validate_table(request.table)
        try:
            data = self.client.rpc("get_column_info", {"_table_name": table}).execute().data
            if data:
                return {"table": table, "columns": data}
        except Exception as e:
            logger.info(f"get_column_info unavailable for {table}, inferring: {e}")

        # Infer from one sample row
        try:
            sample = self.client.table(table).select("*").limit(1).execute().data or []
        except Exception as e:
            supabase_error(e, f"Failed to read {table}")

        columns = []
        if sample:
            for name, value in sample[0].items():
                columns.append(
                    {
                        "column_name": name,
                        "data_type": type(value).__name__ if value is not None else "unknown",
                        "is_nullable": "YES",
                        "column_default": None,
                    }
                )
        return {"table": table, "columns": columns}

    def get_table_data(self, request: DatabaseRequest) -> dict:
        table = validate_table(request.table)
        order_by = sanitize_identifier(request.orderBy)
        page = max(request.page, 1)
        page_size = min(max(request.pageSize, 1), 500)
        start, end = page_range(page, page_size)

        query = self.client.table(table).select("*", count="exact")
        if request.search:
            query = query.eq("id", request.search.strip())

        try:
            result = (
                query.order(order_by, desc=request.orderDir.lower() != "asc")
                .range(start, end)
                .execute()
            )
        except Exception as e:
            supabase_error(e, f"Failed to read {table}")

        total = result.count or 0
        return {
            "data": result.data or [],
            "total": total,
            "page": page,
            "pageSize": page_size,
            "totalPages": total_pages(total, page_size),
        }

    # -----------------------------------------------------
    # Row writes
    # -----------------------------------------------------
    def insert_row(self, request: DatabaseRequest) -> dict:
        table = validate_table(request.table)
        row_data = _require(request.rowData, "rowData")

        try:
            result = self.client.table(table).insert(sanitize(row_data), returning="representation").execute()
        except Exception as e:
            supabase_error(e, f"Failed to insert into {table}")

        row = result.data[0] if result.data else None
        self.audit("ROW_INSERTED", table, (row or {}).get("id"), {"table": table, "row": row})
        return {"success": True, "data": row}

    def update_row(self, request: DatabaseRequest) -> dict:
        table = validate_table(request.table)
        row_id = _require(request.id, "id")
        row_data = _require(request.rowData, "rowData")

        try:
            result = (
                self.client.table(table)
                .update(sanitize(row_data), returning="representation")
                .eq("id", row_id)
                .execute()
            )
        except Exception as e:
            supabase_error(e, f"Failed to update {table}")

        if not result.data:
            raise HTTPException(404, "Row not found")

        self.audit("ROW_UPDATED", table, row_id, {"table": table, "changes": row_data})
        return {"success": True, "data": result.data[0]}

    def delete_row(self, request: DatabaseRequest) -> dict:
        table = validate_table(request.table)
        row_id = _require(request.id, "id")

        try:
            self.client.table(table).delete().eq("id", row_id).execute()
        except Exception as e:
            supabase_error(e, f"Failed to delete from {table}")

        self.audit("ROW_DELETED", table, row_id, {"table": table})
        return {"success": True}

    # -----------------------------------------------------
    # Schema changes
    # -----------------------------------------------------
    def add_column(self, request: DatabaseRequest) -> dict:
        table = validate_table(request.table)
        column = sanitize_identifier(request.columnName)
        column_type = (request.columnType or "").strip().lower()

        if column_type not in VALID_COLUMN_TYPES:
            raise HTTPException(400, f"Invalid column type: {request.columnType}")

        sql = f'ALTER TABLE public."{table}" ADD COLUMN "{column}" {column_type}'
        if not request.nullable:
            sql += " NOT NULL"
        if request.defaultValue:
            sql += f" DEFAULT {quote_literal(request.defaultValue)}"

        self._exec_sql(sql, "Failed to add column")
        self.audit(
            "COLUMN_ADDED",
            table,
            None,
            {
                "table": table,
                "column": column,
                "type": column_type,
                "nullable": request.nullable,
                "defaultValue": request.defaultValue,
            },
        )
        return {"success": True, "message": f"Column '{column}' added to '{table}'"}

    def delete_column(self, request: DatabaseRequest) -> dict:
        table = validate_table(request.table)
        column = sanitize_identifier(request.columnName)

        if column in PROTECTED_COLUMNS:
            raise HTTPException(400, f"Cannot delete protected column: {column}")

        self._exec_sql(f'ALTER TABLE public."{table}" DROP COLUMN "{column}"', "Failed to delete column")
        self.audit("COLUMN_DELETED", table, None, {"table": table, "column": column})
        return {"success": True, "message": f"Column '{column}' deleted from '{table}'"}

    # -----------------------------------------------------
    # Enums
    # -----------------------------------------------------
    def list_enums(self, request: DatabaseRequest) -> dict:
        try:
            data = self.client.rpc("get_enum_types", {}).execute().data
            if data:
                return {"enums": data}
        except Exception as e:
            logger.info(f"get_enum_types unavailable, using known enums: {e}")
        return {"enums": KNOWN_ENUMS}

    def add_enum_value(self, request: DatabaseRequest) -> dict:
        enum_name = sanitize_identifier(request.enumName)
        value = request.value or ""
        if not ENUM_VALUE_RE.match(value):
            raise HTTPException(400, f"Invalid enum value: {value}")

        sql = f'ALTER TYPE public."{enum_name}" ADD VALUE IF NOT EXISTS {quote_literal(value)}'
        self._exec_sql(sql, "Failed to add enum value")
        self.audit("ENUM_VALUE_ADDED", "enum", None, {"enum": enum_name, "value": value})
        return {"success": True, "message": f"Value '{value}' added to enum '{enum_name}'"}

    # -----------------------------------------------------
    # Audit log / health
    # -----------------------------------------------------
    def get_audit_log(self, request: DatabaseRequest) -> dict:
        page = max(request.page, 1)
        page_size = min(max(request.pageSize, 1), 500)
        start, end = page_range(page, page_size)

        query = self.client.table("activity_log").select("*", count="exact")
        if request.entityType:
            query = query.eq("entity_type", request.entityType)

        try:
            result = query.order("created_at", desc=True).range(start, end).execute()
        except Exception as e:
            supabase_error(e, "Failed to read audit log")

        return {
            "data": result.data or [],
            "total": result.count or 0,
            "page": page,
            "pageSize": page_size,
        }

    def database_health(self, request: DatabaseRequest) -> dict:
        counts = {t: self._count(t) for t in ALLOWED_TABLES}
        total = sum(counts.values())
        return {
            "totalRecords": total,
            "totalTables": len(ALLOWED_TABLES),
            "tableCounts": counts,
            "estimatedSizeMB": round(total / 1024, 2),  # ~1 KB per row
            "status": "healthy",
            "timestamp": utcnow().isoformat(),
        }
