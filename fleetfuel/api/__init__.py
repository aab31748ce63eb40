"""Routes API / API routes."""

from fastapi import APIRouter

from fleetfuel.api import (
    auth,
    users,
    roles,
    audit,
    vehicles,
    drivers,
    tanks,
    fueling,
    maintenance,
    reports,
    dashboard,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(drivers.router, prefix="/drivers", tags=["drivers"])
api_router.include_router(tanks.router, prefix="/tanks", tags=["tanks"])
api_router.include_router(fueling.router, prefix="/fueling", tags=["fueling"])
api_router.include_router(maintenance.router, prefix="/maintenance", tags=["maintenance"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
