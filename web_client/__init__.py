"""Controlador del formulario de usuarios (lado cliente)."""

from web_client.controller import ClientController, FormState, Notice

__all__ = ["ClientController", "FormState", "Notice"]
