"""Modelos Pydantic (schemas) para las operaciones y respuestas del User Service."""

import enum
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from user_service.utils import parse_user_id, validate_user_fields


class Action(str, enum.Enum):
    """Operaciones disponibles en /operations?action=..."""
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


# --- Comandos (payload tipado por acción) ---
# `parse` recibe los parámetros crudos (query/formulario) y lanza ValidationError.

class ListUsers(BaseModel):
    @classmethod
    def parse(cls, params: Mapping[str, Any]) -> "ListUsers":
        return cls()


class GetUser(BaseModel):
    id: int

    @classmethod
    def parse(cls, params: Mapping[str, Any]) -> "GetUser":
        return cls(id=parse_user_id(params.get("id")))


class CreateUser(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None

    @classmethod
    def parse(cls, params: Mapping[str, Any]) -> "CreateUser":
        name, email, phone = validate_user_fields(params.get("name"), params.get("email"), params.get("phone"))
        return cls(name=name, email=email, phone=phone)


class UpdateUser(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None

    @classmethod
    def parse(cls, params: Mapping[str, Any]) -> "UpdateUser":
        user_id = parse_user_id(params.get("id"))
        name, email, phone = validate_user_fields(params.get("name"), params.get("email"), params.get("phone"))
        return cls(id=user_id, name=name, email=email, phone=phone)


class DeleteUser(BaseModel):
    id: int

    @classmethod
    def parse(cls, params: Mapping[str, Any]) -> "DeleteUser":
        return cls(id=parse_user_id(params.get("id")))


COMMANDS = {
    Action.LIST: ListUsers,
    Action.GET: GetUser,
    Action.CREATE: CreateUser,
    Action.UPDATE: UpdateUser,
    Action.DELETE: DeleteUser,
}


# --- Schemas de respuesta ---

class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ApiResponse(BaseModel):
    """
    Sobre uniforme de todas las respuestas.
    `error` es el tipo de error legible por máquina; solo aparece si success es False.
    """
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None

    def to_content(self) -> dict:
        """Cuerpo JSON sin las claves vacías del primer nivel (phone=None dentro de data se conserva)."""
        return {key: value for key, value in self.model_dump(mode="json").items() if value is not None}
