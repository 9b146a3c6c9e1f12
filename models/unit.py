# models/unit.py

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from models.enums import UnitAvailability


class UnitBase(BaseModel):
    property_id: str
    unit_number: str = Field(..., min_length=1)
    floor: Optional[str] = None
    room_type: Optional[str] = None
    rent: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    square_feet: Optional[int] = Field(None, ge=0)
    availability: UnitAvailability = UnitAvailability.vacant


class UnitCreate(UnitBase):
    pass


class UnitUpdate(BaseModel):
    unit_number: Optional[str] = None
    floor: Optional[str] = None
    room_type: Optional[str] = None
    rent: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    square_feet: Optional[int] = Field(None, ge=0)
    availability: Optional[UnitAvailability] = None


# -------------------------------------------------
# Tenant ↔ unit assignment
# -------------------------------------------------
class UnitAssignment(BaseModel):
    tenant_id: str
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    rent_amount: Optional[float] = Field(None, ge=0)
