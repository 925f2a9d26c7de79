"""
Controlador del formulario de usuarios.

Máquina de estados sobre un único formulario:
    create  <->  editing      (edit(id) entra, submit exitoso o clear() sale)
    deleting                  (transitorio: request_delete(id) -> confirm/cancel)

Todo el estado vive en un FormState explícito; la vista se entera de los
cambios por el callback `on_change`.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from web_client.api import UsersApi
from web_client.validation import validate_form

logger = logging.getLogger(__name__)

NOTICE_SECONDS = 3.0
NO_DATA_ROW = ("No users found",)
DELETE_PROMPT = "Delete this user?"


@dataclass
class Notice:
    message: str
    kind: str = "info"  # "info" | "error"


@dataclass
class FormState:
    user_id: Optional[int] = None  # marcador oculto del modo edición
    name: str = ""
    email: str = ""
    phone: str = ""
    errors: Dict[str, str] = field(default_factory=dict)
    pending_delete_id: Optional[int] = None
    submitting: bool = False
    users: List[dict] = field(default_factory=list)
    rows: List[Tuple[str, ...]] = field(default_factory=lambda: [NO_DATA_ROW])
    notice: Optional[Notice] = None

    @property
    def editing(self) -> bool:
        return self.user_id is not None

    @property
    def mode(self) -> str:
        if self.pending_delete_id is not None:
            return "deleting"
        return "editing" if self.editing else "create"

    @property
    def submit_label(self) -> str:
        return "Update" if self.editing else "Save"

    @property
    def confirm_message(self) -> Optional[str]:
        return DELETE_PROMPT if self.pending_delete_id is not None else None


def format_date(value: Optional[str]) -> str:
    if not value:
        return "-"
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


def render_rows(users: List[dict]) -> List[Tuple[str, ...]]:
    """Filas de la tabla: id, nombre, email, teléfono ('-' si falta) y fecha de creación."""
    if not users:
        return [NO_DATA_ROW]
    return [
        (
            str(user["id"]),
            user["name"],
            user["email"],
            user.get("phone") or "-",
            format_date(user.get("created_at")),
        )
        for user in users
    ]


class ClientController:
    def __init__(self, api: UsersApi, state: Optional[FormState] = None,
                 notice_seconds: float = NOTICE_SECONDS,
                 on_change: Optional[Callable[[FormState], None]] = None):
        self.api = api
        self.state = state or FormState()
        self.notice_seconds = notice_seconds
        self.on_change = on_change
        self._notice_timer: Optional[asyncio.TimerHandle] = None

    # --- Vista ---

    def _render(self) -> None:
        if self.on_change:
            self.on_change(self.state)

    def show_message(self, message: str, kind: str = "info") -> None:
        """Aviso transitorio; se oculta solo después de notice_seconds."""
        notice = Notice(message=message or "", kind=kind)
        self.state.notice = notice
        if self._notice_timer:
            self._notice_timer.cancel()
        loop = asyncio.get_running_loop()
        self._notice_timer = loop.call_later(self.notice_seconds, self._dismiss, notice)
        self._render()

    def _dismiss(self, notice: Notice) -> None:
        if self.state.notice is notice:
            self.state.notice = None
            self._render()

    def close(self) -> None:
        if self._notice_timer:
            self._notice_timer.cancel()
            self._notice_timer = None

    # --- Formulario ---

    def set_field(self, name: str, value: str) -> None:
        if name not in ("name", "email", "phone"):
            raise KeyError(name)
        setattr(self.state, name, value)

    def clear(self) -> None:
        """Limpia campos y errores y sale del modo edición."""
        self.state.user_id = None
        self.state.name = ""
        self.state.email = ""
        self.state.phone = ""
        self.state.errors = {}
        self._render()

    def validate(self) -> bool:
        self.state.errors = validate_form(self.state.name, self.state.email, self.state.phone)
        return not self.state.errors

    # --- Operaciones ---

    async def load_list(self) -> bool:
        """Recarga la tabla. Si falla, se conserva la vista anterior."""
        result = await self.api.list_users()
        if not result.success:
            self.show_message(result.message, "error")
            return False

        self.state.users = result.data or []
        self.state.rows = render_rows(self.state.users)
        self._render()
        return True

    async def submit(self) -> bool:
        """
        Crea o actualiza según el marcador user_id.
        Mientras hay una petición en curso el envío queda deshabilitado.
        """
        if self.state.submitting:
            logger.debug("Envío ignorado: ya hay una petición en curso.")
            return False

        if not self.validate():
            self._render()
            return False

        state = self.state
        state.submitting = True
        self._render()
        try:
            if state.editing:
                result = await self.api.update_user(state.user_id, state.name.strip(), state.email.strip(), state.phone.strip())
            else:
                result = await self.api.create_user(state.name.strip(), state.email.strip(), state.phone.strip())
        finally:
            state.submitting = False

        if not result.success:
            # Se conserva el formulario para que el usuario corrija
            self.show_message(result.message, "error")
            return False

        self.show_message(result.message)
        self.clear()
        await self.load_list()
        return True

    async def edit(self, user_id: int) -> bool:
        result = await self.api.get_user(user_id)
        if not result.success:
            self.show_message(result.message, "error")
            return False

        user = result.data
        self.state.user_id = user["id"]
        self.state.name = user["name"]
        self.state.email = user["email"]
        self.state.phone = user.get("phone") or ""
        self.state.errors = {}
        self._render()
        return True

    def request_delete(self, user_id: int) -> None:
        self.state.pending_delete_id = user_id
        self._render()

    def cancel_delete(self) -> None:
        self.state.pending_delete_id = None
        self._render()

    async def confirm_delete(self) -> bool:
        user_id = self.state.pending_delete_id
        if user_id is None:
            return False

        # Se consume antes del await: una segunda confirmación no reenvía el DELETE
        self.state.pending_delete_id = None
        self._render()
        result = await self.api.delete_user(user_id)

        if not result.success:
            self.show_message(result.message, "error")
            return False

        self.show_message(result.message)
        if self.state.user_id == user_id:
            # El registro en edición ya no existe
            self.clear()
        await self.load_list()
        return True
