# -------------------------
# Enums
# -------------------------
from .enums import (
    InvoiceStatus,
    OrganizationStatus,
    PaymentMethod,
    PaymentStatus,
    QRPaymentStatus,
    TenantStatus,
    TicketPriority,
    TicketStatus,
    UnitAvailability,
    VerificationDecision,
)

# -------------------------
# Auth Models
# -------------------------
from .auth import (
    LoginRequest,
    ProfileUpdate,
    RefreshRequest,
    SignupRequest,
    TokenResponse,
)

# -------------------------
# Property / Unit Models
# -------------------------
from .property import PropertyBase, PropertyCreate, PropertyUpdate
from .unit import UnitAssignment, UnitBase, UnitCreate, UnitUpdate

# -------------------------
# Tenant Models
# -------------------------
from .tenant import (
    FamilyMemberCreate,
    FamilyMemberUpdate,
    MeterReadingCreate,
    RoomUpdate,
    TenantBillCreate,
    TenantCreate,
    TenantDocumentCreate,
    TenantProfileCreate,
    TenantProfileUpdate,
    TenantUpdate,
)

# -------------------------
# Billing / Maintenance
# -------------------------
from .billing import InvoiceCreate, InvoiceUpdate, PaymentCreate
from .maintenance import TicketCreate, TicketUpdate

# -------------------------
# QR Payments
# -------------------------
from .qr_payment import (
    QRPaymentGenerate,
    QRPaymentVerify,
    ScreenshotSubmit,
)

# -------------------------
# Provisioning / Access
# -------------------------
from .user_create import (
    AdminCreateUser,
    OrganizationCreate,
    PermissionGrant,
    RoleAssignment,
    TenantUserCreate,
)

from .preferences import Preferences, PreferencesUpdate
from .database_admin import DatabaseAction, DatabaseRequest

__all__ = [
    # enums
    "InvoiceStatus",
    "OrganizationStatus",
    "PaymentMethod",
    "PaymentStatus",
    "QRPaymentStatus",
    "TenantStatus",
    "TicketPriority",
    "TicketStatus",
    "UnitAvailability",
    "VerificationDecision",

    # auth
    "LoginRequest",
    "ProfileUpdate",
    "RefreshRequest",
    "SignupRequest",
    "TokenResponse",

    # properties / units
    "PropertyBase",
    "PropertyCreate",
    "PropertyUpdate",
    "UnitAssignment",
    "UnitBase",
    "UnitCreate",
    "UnitUpdate",

    # tenants
    "FamilyMemberCreate",
    "FamilyMemberUpdate",
    "MeterReadingCreate",
    "RoomUpdate",
    "TenantBillCreate",
    "TenantCreate",
    "TenantDocumentCreate",
    "TenantProfileCreate",
    "TenantProfileUpdate",
    "TenantUpdate",

    # billing / maintenance
    "InvoiceCreate",
    "InvoiceUpdate",
    "PaymentCreate",
    "TicketCreate",
    "TicketUpdate",

    # qr payments
    "QRPaymentGenerate",
    "QRPaymentVerify",
    "ScreenshotSubmit",

    # provisioning
    "AdminCreateUser",
    "OrganizationCreate",
    "PermissionGrant",
    "RoleAssignment",
    "TenantUserCreate",

    # preferences / database console
    "Preferences",
    "PreferencesUpdate",
    "DatabaseAction",
    "DatabaseRequest",
]
