# models/property.py

from typing import Optional

from pydantic import BaseModel, Field


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class PropertyBase(BaseModel):
    name: str = Field(..., min_length=1)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    property_type: Optional[str] = None
    total_units: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None


# -------------------------------------------------
# Create
# -------------------------------------------------
class PropertyCreate(PropertyBase):
    """
    organization_id is never accepted from the client; the router stamps
    the caller's own organization.
    """
    pass


# -------------------------------------------------
# Update (PATCH)
# -------------------------------------------------
class PropertyUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    property_type: Optional[str] = None
    total_units: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
