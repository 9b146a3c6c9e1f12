# models/tenant.py

from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from models.enums import TenantStatus


# -------------------------------------------------
# Ledger tenant (tenants table, admin side)
# -------------------------------------------------
class TenantBase(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    status: TenantStatus = TenantStatus.active
    property_id: Optional[str] = None
    unit_id: Optional[str] = None
    rent_amount: Optional[float] = Field(None, ge=0)
    security_deposit: Optional[float] = Field(None, ge=0)


class TenantCreate(TenantBase):
    pass


class TenantUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    status: Optional[TenantStatus] = None
    rent_amount: Optional[float] = Field(None, ge=0)
    security_deposit: Optional[float] = Field(None, ge=0)


# -------------------------------------------------
# Portal tenant profile (tenants_profile, super admin console)
# -------------------------------------------------
class TenantProfileCreate(BaseModel):
    """Arguments of the create_tenant_comprehensive RPC."""

    user_id: Optional[str] = None
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    id_proof_type: Optional[str] = None
    id_proof_url: Optional[str] = None
    profile_photo_url: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None

    def rpc_params(self) -> dict:
        data = self.model_dump(mode="json")
        return {f"_{k}": v for k, v in data.items()}


class TenantProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    status: Optional[TenantStatus] = None


# -------------------------------------------------
# Per-tenant sub-resources
# -------------------------------------------------
class FamilyMemberCreate(BaseModel):
    name: str = Field(..., min_length=1)
    relation: str = Field(..., min_length=1)
    mobile_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    occupation: Optional[str] = None
    is_emergency_contact: bool = False


class FamilyMemberUpdate(BaseModel):
    name: Optional[str] = None
    relation: Optional[str] = None
    mobile_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    occupation: Optional[str] = None
    is_emergency_contact: Optional[bool] = None


class TenantDocumentCreate(BaseModel):
    document_type: str = Field(..., min_length=1)
    document_number: Optional[str] = None
    document_name: Optional[str] = None
    file_url: str = Field(..., min_length=1)
    file_size: Optional[int] = Field(None, ge=0)
    file_type: Optional[str] = None
    expiry_date: Optional[date] = None


class RoomUpdate(BaseModel):
    property_id: Optional[str] = None
    unit_id: Optional[str] = None
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    rent_amount: Optional[float] = Field(None, ge=0)
    security_deposit: Optional[float] = Field(None, ge=0)


class TenantBillCreate(BaseModel):
    invoice_number: str = Field(..., min_length=1)
    bill_type: str = "Rent"
    amount: float = Field(..., gt=0)
    due_date: date
    unit_id: Optional[str] = None


class MeterReadingCreate(BaseModel):
    unit_id: Optional[str] = None
    reading_month: date
    previous_reading: float = Field(..., ge=0)
    current_reading: float = Field(..., ge=0)
    unit_rate: float = Field(..., ge=0)
