from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import AuthenticationError, RemoteError, ValidationError
from .remote import error_message
from .schemas import AuthToken, LoginRequest, SignupRequest
from .session import Session
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class AuthAPI:
    """
    Exchanges credentials for a bearer token.

    Behavior:
    - Credentials are validated locally first; bad input raises ValidationError
      and no request is sent.
    - A 4xx answer raises AuthenticationError carrying the server's message,
      or "Login failed" / "Signup failed" when the body has none.
    - Network failures and 5xx answers raise RemoteError.
    - Success returns a Session ready to hand to a TaskBoard.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "AuthAPI":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def login(self, email: str, password: str) -> Session:
        """POST /auth/login and return the resulting session."""
        try:
            request = LoginRequest(email=email, password=password)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc
        return await self._exchange("/auth/login", request, "Login failed")

    async def signup(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: Optional[str] = None,
    ) -> Session:
        """POST /auth/signup and return the session of the new account."""
        try:
            request = SignupRequest(
                username=username,
                email=email,
                password=password,
                confirm_password=confirm_password,
            )
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc
        return await self._exchange("/auth/signup", request, "Signup failed")

    async def _exchange(self, path: str, request: BaseModel, fallback: str) -> Session:
        payload = request.to_payload() if isinstance(request, SignupRequest) else request.model_dump()
        try:
            response = await self._client.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("POST %s failed: %s", path, exc)
            raise RemoteError(f"Network error: {exc}") from exc

        if 400 <= response.status_code < 500:
            message = error_message(response, fallback)
            logger.info("POST %s rejected: %s %s", path, response.status_code, message)
            raise AuthenticationError(message, response.status_code)
        if response.is_error:
            raise RemoteError(error_message(response, fallback), response.status_code)

        try:
            token = AuthToken.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise RemoteError(f"{fallback}: malformed response", response.status_code) from exc

        logger.info("Authenticated as %s", token.username or "<unnamed>")
        return Session(token=token.token, username=token.username)
