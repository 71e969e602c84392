"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from inhalestays.api.v1 import (
    admin,
    bookings,
    inventory,
    locations,
    notifications,
    payments,
    reports,
    users,
    vendors,
    webhooks,
)

api_router = APIRouter()

# Users
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Locations
api_router.include_router(locations.router, prefix="/locations", tags=["Locations"])

# Vendors
api_router.include_router(vendors.router, prefix="/vendors", tags=["Vendors"])

# Inventory
api_router.include_router(inventory.router, prefix="/inventory", tags=["Inventory"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

# Reports
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])

# Webhooks
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
