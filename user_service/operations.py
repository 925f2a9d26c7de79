"""
Operaciones CRUD sobre la tabla 'users' y despachador de acciones.

Cada operación recibe la sesión del request y un comando ya validado.
Los errores de dominio se lanzan como excepciones (user_service.errors) y
`dispatch` los traduce al sobre {success, data, message, error}.
"""

import logging
from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from user_service.errors import ConflictError, InvalidAction, NotFound, StoreError, UserServiceError
from user_service.models import User
from user_service.schemas import (
    COMMANDS,
    Action,
    ApiResponse,
    CreateUser,
    DeleteUser,
    GetUser,
    UpdateUser,
    UserResponse,
)

logger = logging.getLogger(__name__)


def serialize(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")


def find_user_by_email(db: Session, email: str, exclude_id: Optional[int] = None) -> Optional[User]:
    """Pre-chequeo de unicidad. La restricción uq_users_email sigue siendo la autoridad final."""
    query = db.query(User).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first()


def _find_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"Usuario con ID {user_id} no encontrado.")
        raise NotFound("User not found")
    return user


def list_users(db: Session) -> List[User]:
    try:
        return db.query(User).order_by(User.id.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Error DB listando usuarios: {e}", exc_info=True)
        raise StoreError("Failed to get users")


def get_user(db: Session, cmd: GetUser) -> User:
    try:
        return _find_user(db, cmd.id)
    except SQLAlchemyError as e:
        logger.error(f"Error DB obteniendo usuario {cmd.id}: {e}", exc_info=True)
        raise StoreError("Failed to get user")


def create_user(db: Session, cmd: CreateUser) -> User:
    logger.info(f"Creación de usuario iniciada para email: {cmd.email}")
    try:
        # 1. Validación rápida de unicidad (amigable para el usuario)
        if find_user_by_email(db, cmd.email):
            raise ConflictError("Email already exists")

        # 2. Insertar; si otro request ganó la carrera, la BD lo rechaza
        new_user = User(name=cmd.name, email=cmd.email, phone=cmd.phone)
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Restricción única violada al crear {cmd.email}: {e.orig}")
        raise ConflictError("Email already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error DB creando usuario: {e}", exc_info=True)
        raise StoreError("Failed to create user")

    logger.info(f"Usuario {new_user.id} creado exitosamente.")
    return new_user


def update_user(db: Session, cmd: UpdateUser) -> User:
    logger.info(f"Actualización iniciada para usuario {cmd.id}")
    try:
        user = _find_user(db, cmd.id)

        if find_user_by_email(db, cmd.email, exclude_id=cmd.id):
            raise ConflictError("Email already exists in another user")

        # Reemplazo completo de los campos mutables
        user.name = cmd.name
        user.email = cmd.email
        user.phone = cmd.phone
        user.updated_at = func.now()
        db.commit()
        db.refresh(user)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Restricción única violada al actualizar usuario {cmd.id}: {e.orig}")
        raise ConflictError("Email already exists in another user")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error DB actualizando usuario {cmd.id}: {e}", exc_info=True)
        raise StoreError("Failed to update user")

    logger.info(f"Usuario {cmd.id} actualizado exitosamente.")
    return user


def delete_user(db: Session, cmd: DeleteUser) -> None:
    logger.info(f"Eliminación iniciada para usuario {cmd.id}")
    try:
        user = _find_user(db, cmd.id)
        db.delete(user)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error DB eliminando usuario {cmd.id}: {e}", exc_info=True)
        raise StoreError("Failed to delete user")

    logger.info(f"Usuario {cmd.id} eliminado permanentemente.")


# --- Despachador ---

def _handle_list(db: Session, cmd) -> Tuple[int, ApiResponse]:
    users = list_users(db)
    return 200, ApiResponse(success=True, data=[serialize(u) for u in users])


def _handle_get(db: Session, cmd: GetUser) -> Tuple[int, ApiResponse]:
    return 200, ApiResponse(success=True, data=serialize(get_user(db, cmd)))


def _handle_create(db: Session, cmd: CreateUser) -> Tuple[int, ApiResponse]:
    user = create_user(db, cmd)
    return 201, ApiResponse(success=True, message="User created successfully", data=serialize(user))


def _handle_update(db: Session, cmd: UpdateUser) -> Tuple[int, ApiResponse]:
    update_user(db, cmd)
    return 200, ApiResponse(success=True, message="User updated successfully")


def _handle_delete(db: Session, cmd: DeleteUser) -> Tuple[int, ApiResponse]:
    delete_user(db, cmd)
    return 200, ApiResponse(success=True, message="User deleted successfully")


HANDLERS = {
    Action.LIST: _handle_list,
    Action.GET: _handle_get,
    Action.CREATE: _handle_create,
    Action.UPDATE: _handle_update,
    Action.DELETE: _handle_delete,
}


def parse_action(raw: Optional[str]) -> Action:
    try:
        return Action(raw or "")
    except ValueError:
        raise InvalidAction("Invalid action")


def dispatch(raw_action: Optional[str], params: Mapping[str, Any], db: Session) -> Tuple[int, ApiResponse]:
    """
    Ejecuta una acción y devuelve (status_code, sobre).

    Args:
        raw_action: valor del parámetro 'action' tal cual llegó.
        params: campos del request (query para 'get', formulario para escrituras).
        db: sesión del request.
    """
    try:
        action = parse_action(raw_action)
        cmd = COMMANDS[action].parse(params)
        return HANDLERS[action](db, cmd)
    except UserServiceError as e:
        return e.status_code, ApiResponse(success=False, message=e.message, error=e.kind)
