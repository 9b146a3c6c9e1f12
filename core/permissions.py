# core/permissions.py

from enum import Enum

from core.roles import Role


class Permission(str, Enum):
    """Fine-grained named capabilities, orthogonal to role tiers."""

    # Properties
    view_properties = "view_properties"
    create_properties = "create_properties"
    edit_properties = "edit_properties"
    delete_properties = "delete_properties"

    # Tenants
    view_tenants = "view_tenants"
    create_tenants = "create_tenants"
    edit_tenants = "edit_tenants"
    delete_tenants = "delete_tenants"

    # Units
    view_units = "view_units"
    create_units = "create_units"
    edit_units = "edit_units"
    delete_units = "delete_units"

    # Billing
    view_billing = "view_billing"
    create_billing = "create_billing"
    edit_billing = "edit_billing"
    delete_billing = "delete_billing"

    # Payments
    view_payments = "view_payments"
    create_payments = "create_payments"
    edit_payments = "edit_payments"
    delete_payments = "delete_payments"
    verify_payments = "verify_payments"

    # Maintenance
    view_maintenance = "view_maintenance"
    create_maintenance = "create_maintenance"
    edit_maintenance = "edit_maintenance"
    delete_maintenance = "delete_maintenance"

    # Administration
    view_analytics = "view_analytics"
    manage_users = "manage_users"
    manage_organization = "manage_organization"
    view_settings = "view_settings"

    # Tenant portal
    tenant_dashboard = "tenant_dashboard"
    tenant_profile = "tenant_profile"
    tenant_documents = "tenant_documents"
    tenant_family_members = "tenant_family_members"
    tenant_bills = "tenant_bills"
    tenant_payments = "tenant_payments"

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


WILDCARD = "*"


# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
def _crud(entity: str, *verbs: str) -> list:
    return [f"{verb}_{entity}" for verb in verbs]


ALL_VERBS = ("view", "create", "edit", "delete")

ROLE_PERMISSIONS = {

    # =====================================================
    # SUPER ADMIN: Full access to everything
    # =====================================================
    Role.super_admin: [WILDCARD],

    # =====================================================
    # ORGANIZATION ADMIN
    # =====================================================
    Role.admin: [
        *_crud("properties", *ALL_VERBS),
        *_crud("tenants", *ALL_VERBS),
        *_crud("units", *ALL_VERBS),
        *_crud("billing", *ALL_VERBS),
        *_crud("payments", *ALL_VERBS),
        *_crud("maintenance", *ALL_VERBS),
        "verify_payments",
        "view_analytics",
        "manage_users", "manage_organization", "view_settings",
    ],

    # =====================================================
    # MANAGER: everything but deletes and administration
    # =====================================================
    Role.manager: [
        *_crud("properties", "view", "create", "edit"),
        *_crud("tenants", "view", "create", "edit"),
        *_crud("units", "view", "create", "edit"),
        *_crud("billing", "view", "create", "edit"),
        *_crud("payments", "view", "create", "edit"),
        *_crud("maintenance", "view", "create", "edit"),
        "view_analytics",
        "view_settings",
    ],

    # =====================================================
    # STAFF: maintenance crew
    # =====================================================
    Role.staff: [
        "view_properties", "view_units",
        "view_maintenance", "create_maintenance", "edit_maintenance",
        "view_settings",
    ],

    # =====================================================
    # TENANT: own portal only
    # =====================================================
    Role.tenant: [
        "tenant_dashboard", "tenant_profile", "tenant_documents",
        "tenant_family_members", "tenant_bills", "tenant_payments",
    ],

    # =====================================================
    # USER: read-only staff member of an organization
    # =====================================================
    Role.user: [
        "view_properties", "view_tenants", "view_units",
        "view_billing", "view_payments", "view_maintenance",
        "view_analytics", "view_settings",
    ],

    # =====================================================
    # FALLBACK
    # =====================================================
    Role.guest: [
        "view_properties", "view_settings",
    ],
}


# SPA route → any of these permissions grants access
ROUTE_PERMISSIONS = {
    "/properties": ["view_properties"],
    "/tenants": ["view_tenants"],
    "/units": ["view_units"],
    "/billing": ["view_billing"],
    "/payments": ["view_payments"],
    "/maintenance": ["view_maintenance"],
    "/analytics": ["view_analytics"],
    "/settings": ["view_settings"],
}
