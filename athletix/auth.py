"""
Auth Service Client
===================

Thin async client for the hosted auth service (Supabase GoTrue REST API).
Covers the primitives the API needs:
- sign-up, password sign-in, sign-out
- password recovery email and password update
- admin lookup and deletion of accounts (service role key)

The client owns one ``httpx.AsyncClient`` and is closed by the application
lifespan.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised when the auth service rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int = 500, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def is_duplicate_account(self) -> bool:
        return (
            self.code in ("user_already_exists", "email_exists")
            or "already registered" in self.message.lower()
            or self.status_code == 422
        )


class AuthUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: UUID
    email: Optional[str] = None
    identities: Optional[List[Dict[str, Any]]] = None
    user_metadata: Dict[str, Any] = {}


class AuthSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: AuthUser


class AuthClient:
    """Client for the auth service REST endpoints."""

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        service_role_key: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.service_role_key = service_role_key
        self._http = httpx.AsyncClient(
            base_url=f"{self.base_url}/auth/v1",
            timeout=timeout,
            transport=transport,
            headers={"apikey": anon_key},
        )
        logger.info("Initialized AuthClient with base URL: %s", self.base_url)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        admin: bool = False,
        **kwargs,
    ) -> Any:
        """Send one request and return the decoded JSON body (or None)."""
        headers = kwargs.pop("headers", {})
        if admin:
            headers["apikey"] = self.service_role_key
            headers["Authorization"] = f"Bearer {self.service_role_key}"
        elif token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Auth service request %s %s failed: %s", method, path, e)
            raise AuthError(f"Auth service unavailable: {e}", status_code=502) from e

        if response.is_error:
            raise self._error_from_response(response)

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_from_response(response: httpx.Response) -> AuthError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        message = (
            body.get("msg")
            or body.get("error_description")
            or body.get("message")
            or body.get("error")
            or response.reason_phrase
        )
        code = body.get("error_code") or body.get("code")
        return AuthError(str(message), status_code=response.status_code, code=code if isinstance(code, str) else None)

    @staticmethod
    def _parse(model, body: Any):
        try:
            return model.model_validate(body)
        except ValidationError as e:
            logger.error("Malformed auth service response for %s: %s", model.__name__, e)
            raise AuthError("Malformed auth service response", status_code=502) from e

    # =========================================================================
    # USER-FACING PRIMITIVES
    # =========================================================================

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[Dict[str, Any]] = None,
        redirect_to: Optional[str] = None,
    ) -> AuthUser:
        params = {"redirect_to": redirect_to} if redirect_to else None
        body = await self._request(
            "POST",
            "/signup",
            json={"email": email, "password": password, "data": metadata or {}},
            params=params,
        )
        # With auto-confirm enabled the service answers with a session
        user = body.get("user", body) if isinstance(body, dict) else body
        return self._parse(AuthUser, user)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        body = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return self._parse(AuthSession, body)

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "/logout", token=access_token)

    async def reset_password_for_email(self, email: str, redirect_to: Optional[str] = None) -> None:
        params = {"redirect_to": redirect_to} if redirect_to else None
        await self._request("POST", "/recover", json={"email": email}, params=params)

    async def update_password(self, access_token: str, password: str) -> AuthUser:
        body = await self._request("PUT", "/user", token=access_token, json={"password": password})
        return self._parse(AuthUser, body)

    # =========================================================================
    # ADMIN PRIMITIVES
    # =========================================================================

    async def get_user_by_id(self, user_id: UUID) -> AuthUser:
        body = await self._request("GET", f"/admin/users/{user_id}", admin=True)
        return self._parse(AuthUser, body)

    async def delete_user(self, user_id: UUID) -> None:
        await self._request("DELETE", f"/admin/users/{user_id}", admin=True)

    async def health(self) -> bool:
        """True when the auth service answers its health endpoint."""
        try:
            await self._request("GET", "/health")
        except AuthError:
            return False
        return True

    async def close(self) -> None:
        await self._http.aclose()
