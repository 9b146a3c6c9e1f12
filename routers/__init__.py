# routers/__init__.py

from .auth import router as auth_router
from .access import router as access_router
from .user_access import router as user_access_router
from .preferences import router as preferences_router

from .properties import router as properties_router
from .units import router as units_router
from .tenants import router as tenants_router
from .invoices import router as invoices_router
from .payments import router as payments_router
from .maintenance import router as maintenance_router

from .tenant_management import router as tenant_management_router
from .admin_tenant_management import router as admin_tenant_management_router
from .tenant_portal import router as tenant_portal_router
from .qr_payments import router as qr_payments_router

from .provisioning import router as provisioning_router
from .database_management import router as database_management_router
from .health import router as health_router


ALL_ROUTERS = [
    # Auth + access control
    auth_router,
    access_router,
    user_access_router,
    preferences_router,

    # Organization data
    properties_router,
    units_router,
    tenants_router,
    invoices_router,
    payments_router,
    maintenance_router,

    # Tenants
    tenant_management_router,
    admin_tenant_management_router,
    tenant_portal_router,
    qr_payments_router,

    # Administration
    provisioning_router,
    database_management_router,

    # Health
    health_router,
]

__all__ = ["ALL_ROUTERS"]
