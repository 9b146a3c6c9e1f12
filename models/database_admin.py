# models/database_admin.py

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from models.enums import BaseStrEnum


class DatabaseAction(BaseStrEnum):
    list_tables = "list_tables"
    get_table_schema = "get_table_schema"
    get_table_data = "get_table_data"
    insert_row = "insert_row"
    update_row = "update_row"
    delete_row = "delete_row"
    add_column = "add_column"
    delete_column = "delete_column"
    list_enums = "list_enums"
    add_enum_value = "add_enum_value"
    get_audit_log = "get_audit_log"
    database_health = "database_health"


class DatabaseRequest(BaseModel):
    """
    Single action-dispatch body. Field names follow the console's camelCase
    wire format.
    """

    model_config = ConfigDict(extra="ignore")

    action: str
    table: Optional[str] = None
    id: Optional[str] = None
    rowData: Optional[Dict[str, Any]] = None

    page: int = 1
    pageSize: int = 50
    search: Optional[str] = None
    orderBy: str = "created_at"
    orderDir: str = "desc"

    columnName: Optional[str] = None
    columnType: Optional[str] = None
    nullable: bool = True
    defaultValue: Optional[str] = None

    enumName: Optional[str] = None
    value: Optional[str] = None

    entityType: Optional[str] = None
