from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError, DBAPIError
import logging

logger = logging.getLogger(__name__)


# =====================================================================
# ERRORES DE DOMINIO
# =====================================================================

class AppError(Exception):
    """
    Error de dominio con un tipo distinguible y un mensaje legible.
    Los directorios (sedes, usuarios, residentes) lanzan estas excepciones;
    la capa HTTP las traduce a códigos de estado.
    """
    status_code = 400
    kind = "app_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Datos mal formados: fechas fuera de orden, RUT inválido, capacidad fuera de rango."""
    status_code = 400
    kind = "validation_error"


class StateError(AppError):
    """Operación inválida para el estado actual (ya egresado, sede llena o inactiva...)."""
    status_code = 400
    kind = "state_error"


class NotFoundError(AppError):
    """Entidad referenciada inexistente."""
    status_code = 404
    kind = "not_found"


class ConflictError(AppError):
    """Violación de unicidad (email, RUT, nombre de sede)."""
    status_code = 409
    kind = "conflict"


def _error_body(message, kind: str, **extra) -> dict:
    body = {"error": True, "message": message, "type": kind}
    body.update(extra)
    return body


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.warning(f"{exc.kind}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.kind)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Solo loguear como ERROR si es un error del servidor (5xx)
        if exc.status_code >= 500:
            logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
        elif exc.status_code >= 400:
            logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail}")

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail, "http_error"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Errores de forma de la petición: 400 como el resto de validaciones
        logger.warning(f"Validation Error: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "Error de validación en los datos enviados",
                "validation_error",
                details=jsonable_encoder(exc.errors()),
            )
        )

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError):
        error_message = str(exc.orig).lower() if getattr(exc, 'orig', None) is not None else str(exc).lower()

        if "unique" in error_message or "duplicate key" in error_message:
            if "email" in error_message:
                message = "El email ya está registrado"
            elif "rut" in error_message:
                message = "El RUT ya está registrado en el sistema"
            elif "sites" in error_message or "name" in error_message:
                message = "Ya existe una sede con ese nombre"
            else:
                message = "Ya existe un registro con esos datos únicos"
            status_code, kind = 409, "conflict"

        elif "foreign key" in error_message:
            message = "No se puede eliminar/actualizar este registro porque está siendo referenciado por otros registros"
            status_code, kind = 400, "integrity_error"

        elif "not null" in error_message or "not-null" in error_message:
            message = "Faltan campos obligatorios"
            status_code, kind = 400, "integrity_error"

        else:
            message = "Error de integridad en la base de datos"
            status_code, kind = 400, "integrity_error"

        logger.error(f"Database Integrity Error: {error_message}")
        return JSONResponse(status_code=status_code, content=_error_body(message, kind))

    @app.exception_handler(DBAPIError)
    async def db_exception_handler(request: Request, exc: DBAPIError):
        logger.error(f"Database Error: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content=_error_body("Error en la base de datos", "database_error")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected Error: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("Error interno del servidor", "internal_error")
        )
