"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que create_all les détecte.
Import all models here so create_all can detect them.
"""

from fleetfuel.models.audit import AuditLog
from fleetfuel.models.user import User, Role, Permission, user_roles
from fleetfuel.models.vehicle import Vehicle, VehicleKind, VehicleStatus, FuelType
from fleetfuel.models.driver import Driver
from fleetfuel.models.tank import Tank, TankMovement, MovementDirection
from fleetfuel.models.fueling import FuelingRecord
from fleetfuel.models.maintenance import MaintenanceTicket, MaintenanceStatus

__all__ = [
    "AuditLog",
    "User",
    "Role",
    "Permission",
    "user_roles",
    "Vehicle",
    "VehicleKind",
    "VehicleStatus",
    "FuelType",
    "Driver",
    "Tank",
    "TankMovement",
    "MovementDirection",
    "FuelingRecord",
    "MaintenanceTicket",
    "MaintenanceStatus",
]
