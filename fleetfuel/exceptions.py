"""
Erreurs metier et gestionnaires HTTP / Domain errors and HTTP handlers.

Les services levent ces erreurs, les routes les laissent remonter.
Services raise these errors, routes let them propagate.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

log = logging.getLogger(__name__)


class FleetError(Exception):
    """Erreur metier de base / Base domain error."""

    error_code = "ERR_FLEET"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(FleetError):
    """Entree invalide (forme ou plage) / Bad input shape or range."""

    error_code = "ERR_VALIDATION"
    status_code = 422


class NotFoundError(FleetError):
    """Ressource inconnue / Unknown tank, vehicle or record."""

    error_code = "ERR_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} {resource_id} not found"
        super().__init__(message, {"resource": resource, "id": resource_id})


class ConflictError(FleetError):
    """Valeur unique deja prise / Unique value already taken (plate, registration, username)."""

    error_code = "ERR_CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class InsufficientStockError(FleetError):
    """Une sortie rendrait le niveau negatif / Outbound would go below zero."""

    error_code = "ERR_STOCK"
    status_code = status.HTTP_409_CONFLICT


class CapacityExceededError(FleetError):
    """Une entree depasserait la capacite / Inbound would overflow the tank."""

    error_code = "ERR_CAPACITY"
    status_code = status.HTTP_409_CONFLICT


class PersistenceError(FleetError):
    """Echec du stockage sous-jacent / Underlying storage call failed."""

    error_code = "ERR_PERSISTENCE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


async def fleet_error_handler(request: Request, exc: FleetError) -> JSONResponse:
    """Rendu JSON uniforme / Uniform JSON rendering of domain errors."""
    if isinstance(exc, PersistenceError):
        log.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )
