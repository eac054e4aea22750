from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Session:
    """
    Authenticated session context: the bearer credential attached to every
    remote call, plus the account's display name.

    Created by AuthAPI on successful login/signup and handed to a TaskBoard,
    which owns it until close().
    """

    token: str
    username: str = ""

    def __post_init__(self) -> None:
        if not self.token or not self.token.strip():
            raise ValueError("session token is required")

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def __repr__(self) -> str:
        return f"Session(username={self.username!r}, token=<redacted>)"
