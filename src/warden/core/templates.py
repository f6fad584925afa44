"""Canonical default grants for coarse role names.

Templates only seed a principal or membership that has nothing recorded yet.
Once explicit grants exist they win and the template is not consulted again.
"""

from __future__ import annotations

from typing import Literal

from warden.models.grant import Grant, Scope

TEMPLATE_VERSION = 1

RoleKind = Literal["project", "global"]

# Most to least permissive
PROJECT_ROLE_ORDER = ("owner", "admin", "member", "viewer")
GLOBAL_ROLE_ORDER = ("admin", "user", "guest")


def _g(resource: str, actions: str, scope: Scope = Scope.ALL) -> Grant:
    return Grant(resource=resource, actions=frozenset(actions.split()), scope=scope)


_PROJECT_TEMPLATES: dict[str, tuple[Grant, ...]] = {
    "owner": (
        _g("projects", "read write delete"),
        _g("agents", "read write delete execute"),
        _g("workflows", "read write delete execute"),
        _g("data", "read write delete"),
        _g("users", "read write"),
        _g("reports", "read write delete export"),
        _g("settings", "read write"),
        _g("files", "read write delete"),
    ),
    "admin": (
        _g("projects", "read write"),
        _g("agents", "read write execute"),
        _g("workflows", "read write execute"),
        _g("data", "read write"),
        _g("users", "read"),
        _g("reports", "read write export"),
        _g("settings", "read"),
        _g("files", "read write"),
    ),
    "member": (
        _g("projects", "read"),
        _g("agents", "read execute"),
        _g("workflows", "read execute"),
        _g("data", "read write", Scope.OWN),
        _g("reports", "read export"),
        _g("files", "read write", Scope.OWN),
    ),
    "viewer": (
        _g("projects", "read"),
        _g("agents", "read"),
        _g("workflows", "read"),
        _g("data", "read"),
        _g("users", "read"),
        _g("reports", "read"),
        _g("settings", "read"),
        _g("files", "read"),
    ),
}

_GLOBAL_TEMPLATES: dict[str, tuple[Grant, ...]] = {
    "admin": (
        _g("projects", "read write delete approve"),
        _g("agents", "read write delete execute approve"),
        _g("workflows", "read write delete execute approve"),
        _g("data", "read write delete export"),
        _g("users", "read write delete"),
        _g("reports", "read write delete export"),
        _g("settings", "read write"),
        _g("files", "read write delete"),
    ),
    "user": (
        _g("projects", "read write", Scope.OWN),
        _g("agents", "read execute"),
        _g("workflows", "read execute"),
        _g("data", "read write", Scope.OWN),
        _g("reports", "read"),
        _g("files", "read write", Scope.OWN),
    ),
    "guest": (
        _g("projects", "read"),
        _g("users", "read", Scope.OWN),
    ),
}


def default_grants_for_role(role: str, *, kind: RoleKind | None = None) -> frozenset[Grant]:
    """Return the template grants for a role, or an empty set for unknown roles.

    ``admin`` exists as both a project and a global role; it resolves to the
    project template unless ``kind="global"`` is given. ``user`` and ``guest``
    only exist globally and ``owner``, ``member`` and ``viewer`` only per project.
    """
    if kind == "global":
        return frozenset(_GLOBAL_TEMPLATES.get(role, ()))
    if kind == "project" or role in _PROJECT_TEMPLATES:
        return frozenset(_PROJECT_TEMPLATES.get(role, ()))
    return frozenset(_GLOBAL_TEMPLATES.get(role, ()))


def role_rank(role: str, *, kind: RoleKind = "project") -> int:
    """Permissiveness rank of a role; higher is broader, 0 for unknown roles."""
    order = PROJECT_ROLE_ORDER if kind == "project" else GLOBAL_ROLE_ORDER
    if role not in order:
        return 0
    return len(order) - order.index(role)
