from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# UNIT AVAILABILITY
# -----------------------------------------------------
class UnitAvailability(BaseStrEnum):
    """Occupancy of a rentable unit."""

    vacant = "vacant"
    occupied = "occupied"
    maintenance = "maintenance"


# -----------------------------------------------------
# TENANT STATUS
# -----------------------------------------------------
class TenantStatus(BaseStrEnum):
    active = "active"
    inactive = "inactive"
    pending = "pending"


# -----------------------------------------------------
# INVOICE STATUS
# -----------------------------------------------------
class InvoiceStatus(BaseStrEnum):
    """Billing lifecycle of an invoice."""

    pending = "pending"
    paid = "paid"
    overdue = "overdue"
    cancelled = "cancelled"


# Allowed status moves; paid and cancelled are terminal
INVOICE_TRANSITIONS = {
    InvoiceStatus.pending: {InvoiceStatus.paid, InvoiceStatus.overdue, InvoiceStatus.cancelled},
    InvoiceStatus.overdue: {InvoiceStatus.paid, InvoiceStatus.cancelled},
    InvoiceStatus.paid: set(),
    InvoiceStatus.cancelled: set(),
}


# -----------------------------------------------------
# PAYMENT STATUS / METHOD
# -----------------------------------------------------
class PaymentStatus(BaseStrEnum):
    completed = "completed"
    pending = "pending"
    failed = "failed"
    refunded = "refunded"


class PaymentMethod(BaseStrEnum):
    cash = "cash"
    bank_transfer = "bank_transfer"
    upi = "upi"
    card = "card"
    cheque = "cheque"
    other = "other"


# -----------------------------------------------------
# MAINTENANCE TICKETS
# -----------------------------------------------------
class TicketStatus(BaseStrEnum):
    """Freely re-orderable; no transition rules."""

    open = "open"
    in_progress = "in_progress"
    completed = "completed"


class TicketPriority(BaseStrEnum):
    high = "high"
    medium = "medium"
    low = "low"


# -----------------------------------------------------
# QR PAYMENTS
# -----------------------------------------------------
class QRPaymentStatus(BaseStrEnum):
    """
    pending -> screenshot_submitted -> approved | rejected

    Expiry is never written; it is derived from expires_at when read.
    """

    pending = "pending"
    screenshot_submitted = "screenshot_submitted"
    approved = "approved"
    rejected = "rejected"


class VerificationDecision(BaseStrEnum):
    approved = "approved"
    rejected = "rejected"


# Statuses an admin may still verify
VERIFIABLE_QR_STATUSES = (QRPaymentStatus.pending, QRPaymentStatus.screenshot_submitted)


# -----------------------------------------------------
# ORGANIZATION STATUS
# -----------------------------------------------------
class OrganizationStatus(BaseStrEnum):
    active = "active"
    suspended = "suspended"
    inactive = "inactive"
