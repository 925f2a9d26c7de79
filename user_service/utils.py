"""Funciones de utilidad para el servicio de usuarios: configuración y validación de campos."""

import os
import re
import logging
from typing import Optional, Tuple

from dotenv import load_dotenv
from email_validator import validate_email, EmailNotValidError

from user_service.errors import ValidationError

# Carga variables de entorno desde .env
load_dotenv()

logger = logging.getLogger(__name__)

# --- Configuración de CORS ---
# Lista separada por comas, ej: "http://localhost:3000,http://127.0.0.1:3000"
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost,http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

# --- Límites (coinciden con el tamaño de las columnas) ---
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 100
PHONE_MAX_LENGTH = 20

# re.ASCII: \d y \s solo aceptan caracteres ASCII
NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$", re.ASCII)
PHONE_PATTERN = re.compile(r"^[\d\s\-+()]+$", re.ASCII)
USER_ID_PATTERN = re.compile(r"^\d+$", re.ASCII)


def parse_user_id(raw) -> int:
    """
    Convierte el ID recibido (query o formulario) en un entero positivo.

    Raises:
        ValidationError: si el ID falta, no es numérico o no es positivo.
    """
    if raw is None or isinstance(raw, bool):
        raise ValidationError("Invalid user ID")
    if isinstance(raw, int):
        user_id = raw
    else:
        # int() aceptaría "1_0" o dígitos no ASCII
        text = str(raw).strip()
        if not USER_ID_PATTERN.fullmatch(text):
            raise ValidationError("Invalid user ID")
        user_id = int(text)
    if user_id <= 0:
        raise ValidationError("Invalid user ID")
    return user_id


def _check_length(label: str, value: str, limit: int) -> None:
    if len(value) > limit:
        raise ValidationError(f"{label} must be at most {limit} characters")


def validate_user_fields(name: Optional[str], email: Optional[str], phone: Optional[str] = None) -> Tuple[str, str, Optional[str]]:
    """
    Valida y normaliza (trim) los campos de un usuario.

    Returns:
        Tupla (name, email, phone). phone es None si llegó vacío.

    Raises:
        ValidationError: con el primer problema encontrado.
    """
    name = (name or "").strip()
    email = (email or "").strip()
    phone = (phone or "").strip()

    if not name or not email:
        raise ValidationError("Name and email are required")

    if not NAME_PATTERN.match(name):
        raise ValidationError("Name can only contain letters and spaces")
    _check_length("Name", name, NAME_MAX_LENGTH)

    try:
        # Solo sintaxis; se guarda el email tal cual lo escribió el usuario
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        logger.debug(f"Email rechazado '{email}': {e}")
        raise ValidationError("Invalid email format")
    _check_length("Email", email, EMAIL_MAX_LENGTH)

    if phone:
        if not PHONE_PATTERN.match(phone):
            raise ValidationError("Phone can only contain numbers and phone characters")
        _check_length("Phone", phone, PHONE_MAX_LENGTH)

    return name, email, phone or None
