"""Taxonomía de errores del servicio de usuarios."""


class UserServiceError(Exception):
    """Error de dominio que se reporta al cliente como {success: false, message}."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(UserServiceError):
    """Entrada mal formada o incompleta. Se detecta antes de tocar la BD."""

    kind = "validation_error"
    status_code = 400


class NotFound(UserServiceError):
    kind = "not_found"
    status_code = 404


class ConflictError(UserServiceError):
    """Email duplicado (pre-chequeo o restricción única de la BD)."""

    kind = "conflict"
    status_code = 409


class StoreError(UserServiceError):
    """Fallo de conexión o de consulta. El detalle interno solo va al log."""

    kind = "store_error"
    status_code = 500


class InvalidAction(UserServiceError):
    kind = "invalid_action"
    status_code = 400
