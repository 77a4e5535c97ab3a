"""
Shared-secret API-key authentication.

How it works
------------
Clients send a key in the `X-API-Key` header. Keys, the user they stand for and
that user's roles come from the environment:

    AUTH_ENABLED=1
    API_KEYS="dashkey:dashboard:viewer,opskey:ops:runner|viewer"

Roles used by this service:
- any valid key may read evaluations, performance and results
- `runner` (or `admin`) is required to trigger a run

Auth is OFF by default so local development needs no setup. Deployments that expose
the API must turn it on. This is a gate, not an identity system: SSO/JWT would sit
in front of the service in a larger setup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from fastapi import Header, HTTPException

RUN_ROLES = frozenset({"runner", "admin"})


@dataclass(frozen=True)
class AuthContext:
    """Identity + roles derived from the API key."""

    user: str
    roles: frozenset[str]
    authenticated: bool


SYSTEM_CONTEXT = AuthContext(user="SYSTEM", roles=frozenset({"system"}), authenticated=False)


def _is_truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def auth_enabled() -> bool:
    """Feature flag (AUTH_ENABLED). Read per request so tests can toggle it."""

    return _is_truthy(os.getenv("AUTH_ENABLED"))


def parse_api_keys(raw: str | None) -> dict[str, AuthContext]:
    """
    Parse API_KEYS into {key: AuthContext}.

    Format: comma-separated `key:user:role1|role2` entries.
    A malformed entry raises ValueError (misconfiguration should be loud).
    """

    if not raw:
        return {}

    mapping: dict[str, AuthContext] = {}
    for entry in (e.strip() for e in raw.split(",")):
        if not entry:
            continue
        parts = entry.split(":")
        if len(parts) != 3 or not parts[0]:
            raise ValueError(
                "Invalid API_KEYS entry. Expected 'key:user:role1|role2' (comma-separated)."
            )
        key, user, roles_raw = parts
        roles = frozenset(r.strip() for r in roles_raw.split("|") if r.strip())
        mapping[key] = AuthContext(user=user, roles=roles, authenticated=True)
    return mapping


def get_auth_context(x_api_key: str | None) -> AuthContext:
    """
    Resolve the request's AuthContext.

    - auth disabled: SYSTEM context, no key needed
    - auth enabled: X-API-Key must match an API_KEYS entry (401 otherwise)
    """

    if not auth_enabled():
        return SYSTEM_CONTEXT

    api_keys = parse_api_keys(os.getenv("API_KEYS"))
    if not api_keys:
        raise HTTPException(
            status_code=500,
            detail="AUTH_ENABLED=1 but API_KEYS is not configured",
        )

    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing X-API-Key")

    ctx = api_keys.get(x_api_key)
    if ctx is None:
        raise HTTPException(status_code=401, detail="Invalid X-API-Key")
    return ctx


def require_roles(required: set[str] | frozenset[str] | None = None):
    """
    FastAPI dependency factory.

    With no `required` roles any valid key passes; otherwise the key's roles must
    intersect `required` (403 if not). Everything passes while auth is disabled.
    """

    def _dep(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> AuthContext:
        ctx = get_auth_context(x_api_key)

        if auth_enabled() and required:
            if ctx.roles.isdisjoint(required):
                raise HTTPException(status_code=403, detail="Forbidden (insufficient role)")
        return ctx

    return _dep
