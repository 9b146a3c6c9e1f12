# models/maintenance.py

from typing import Optional

from pydantic import BaseModel, Field

from models.enums import TicketPriority, TicketStatus


class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: TicketPriority = TicketPriority.medium
    property_id: Optional[str] = None
    unit_id: Optional[str] = None
    assignee_id: Optional[str] = None


class TicketUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assignee_id: Optional[str] = None
