"""Authentication state handed to the repository layer."""

from __future__ import annotations

from pydantic import BaseModel


class AuthState(BaseModel):
    is_authenticated: bool = False
    is_loading: bool = False
    credential: str | None = None


class UserInfo(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    roles: list[str] = []
