"""Bearer credential inspection for the auth state forwarded to the remote API.

The remote API validates tokens itself; here claims are only read
(unverified) to recognise expired JWTs early and to key per-user state.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any

from jose import jwt
from jose.exceptions import JWTError

from personnel.models.auth import AuthState, UserInfo

logger = logging.getLogger("personnel_auth")

NOT_AUTHENTICATED_MESSAGE = "Nicht authentifiziert. Bitte melden Sie sich erneut an."
MISSING_CREDENTIAL_MESSAGE = "Kein Authentifizierungs-Token vorhanden."


def read_token_claims(token: str) -> dict[str, Any]:
    """Unverified claims of a JWT, or an empty dict for opaque tokens."""
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return {}


def is_token_expired(claims: dict[str, Any], now: float | None = None) -> bool:
    exp = claims.get("exp")
    if not isinstance(exp, int | float):
        return False
    current = time.time() if now is None else now
    return exp <= current


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


def build_auth_state(authorization: str | None) -> AuthState:
    token = extract_bearer_token(authorization)
    if token is None:
        return AuthState(is_authenticated=False)

    claims = read_token_claims(token)
    if is_token_expired(claims):
        logger.info("Bearer token expired — treating request as unauthenticated")
        return AuthState(is_authenticated=False, credential=token)

    return AuthState(is_authenticated=True, credential=token)


def extract_roles_from_token(payload: dict[str, Any]) -> list[str]:
    roles = payload.get("roles", [])
    if not isinstance(roles, list):
        return []
    return [str(r) for r in roles if isinstance(r, str | int)]


def session_id(auth: AuthState) -> str:
    """Stable per-user key: the token's ``oid``/``sub`` claim, else a digest of the credential."""
    credential = auth.credential or ""
    claims = read_token_claims(credential) if credential else {}
    subject = claims.get("oid") or claims.get("sub")
    if subject:
        return str(subject)
    return hashlib.sha256(credential.encode("utf-8")).hexdigest()[:16]


def describe_user(auth: AuthState) -> UserInfo:
    if not auth.credential:
        return UserInfo()
    claims = read_token_claims(auth.credential)
    return UserInfo(
        id=claims.get("oid") or claims.get("sub"),
        name=claims.get("name"),
        email=claims.get("preferred_username") or claims.get("email"),
        roles=extract_roles_from_token(claims),
    )
