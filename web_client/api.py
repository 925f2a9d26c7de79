"""Cliente HTTP asíncrono (httpx) para el endpoint /operations del User Service."""

import logging
import os
from typing import Any, Optional

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

logger = logging.getLogger(__name__)

USER_SERVICE_URL = os.getenv("USER_SERVICE_URL", "http://localhost:8000")


class ApiResult(BaseModel):
    """Sobre {success, data, message, error} tal como lo devuelve el servicio."""
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None


class UsersApi:
    """Envuelve las cinco acciones del servicio. No reintenta ni cancela peticiones."""

    def __init__(self, base_url: str = USER_SERVICE_URL, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 15.0):
        self.client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _call(self, method: str, action: str, failure: str, params: Optional[dict] = None, data: Optional[dict] = None) -> ApiResult:
        query = {"action": action, **(params or {})}
        try:
            response = await self.client.request(method, "/operations", params=query, data=data)
            # Los errores de dominio también traen el sobre JSON (400/404/409/500)
            return ApiResult.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"{failure}: {e}")
            return ApiResult(success=False, message=f"{failure}: {e}")

    async def list_users(self) -> ApiResult:
        return await self._call("GET", "list", "Failed to load users list")

    async def get_user(self, user_id: int) -> ApiResult:
        return await self._call("GET", "get", "Failed to get user information", params={"id": user_id})

    async def create_user(self, name: str, email: str, phone: str = "") -> ApiResult:
        return await self._call("POST", "create", "Failed to create user",
                                data={"name": name, "email": email, "phone": phone or ""})

    async def update_user(self, user_id: int, name: str, email: str, phone: str = "") -> ApiResult:
        return await self._call("POST", "update", "Failed to update user",
                                data={"id": str(user_id), "name": name, "email": email, "phone": phone or ""})

    async def delete_user(self, user_id: int) -> ApiResult:
        return await self._call("POST", "delete", "Failed to delete user", data={"id": str(user_id)})
