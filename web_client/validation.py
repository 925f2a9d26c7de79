"""Validación local del formulario. Nunca llama a la red."""

import re
from typing import Dict, Optional

NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$", re.ASCII)
PHONE_PATTERN = re.compile(r"^[\d\s\-+()]+$", re.ASCII)


def validate_name(name: str) -> Optional[str]:
    name = (name or "").strip()
    if not name:
        return "Name is required"
    if not NAME_PATTERN.match(name):
        return "Name can only contain letters and spaces"
    return None


def validate_email(email: str) -> Optional[str]:
    email = (email or "").strip()
    if not email:
        return "Email is required"
    # Chequeo básico; la validación completa la hace el servidor
    if "@" not in email or "." not in email:
        return "Please enter a valid email"
    return None


def validate_phone(phone: str) -> Optional[str]:
    phone = (phone or "").strip()
    if phone and not PHONE_PATTERN.match(phone):
        return "Phone can only contain numbers and phone characters"
    return None


def validate_form(name: str, email: str, phone: str) -> Dict[str, str]:
    """Devuelve {campo: mensaje} con todos los errores; vacío si el formulario es válido."""
    checks = {
        "name": validate_name(name),
        "email": validate_email(email),
        "phone": validate_phone(phone),
    }
    return {field: message for field, message in checks.items() if message}
