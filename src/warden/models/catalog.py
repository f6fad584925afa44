"""Permission catalog: known resources, actions and permission sets."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from warden.models.grant import Grant, PermissionSet, Scope

logger = logging.getLogger(__name__)

DEFAULT_RESOURCES = frozenset(
    {"projects", "agents", "workflows", "data", "users", "reports", "settings", "files"}
)
DEFAULT_ACTIONS = frozenset({"read", "write", "delete", "execute", "approve", "export"})


class CatalogError(Exception):
    """Raised when a catalog file cannot be read or is malformed."""


class PermissionCatalog(BaseModel):
    """Read-only snapshot of the reference data used during evaluation."""

    model_config = ConfigDict(frozen=True)

    resources: frozenset[str] = DEFAULT_RESOURCES
    actions: frozenset[str] = DEFAULT_ACTIONS
    permission_sets: tuple[PermissionSet, ...] = ()

    def get_set(self, set_id: str) -> PermissionSet | None:
        for permission_set in self.permission_sets:
            if permission_set.id == set_id:
                return permission_set
        return None

    @property
    def set_ids(self) -> frozenset[str]:
        return frozenset(s.id for s in self.permission_sets)

    @classmethod
    def load(cls, path: Path) -> PermissionCatalog:
        """Load a catalog from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise CatalogError(f"Cannot read catalog {path}: {e}") from e

        try:
            catalog = cls.model_validate(data)
        except ValidationError as e:
            raise CatalogError(f"Malformed catalog {path}: {e}") from e

        logger.info(
            "Loaded catalog from %s (%d resources, %d actions, %d sets)",
            path,
            len(catalog.resources),
            len(catalog.actions),
            len(catalog.permission_sets),
        )
        return catalog

    @classmethod
    def default(cls) -> PermissionCatalog:
        """Built-in catalog with the stock resources and permission sets."""
        return cls(permission_sets=DEFAULT_PERMISSION_SETS)


def _grant(resource: str, actions: list[str], scope: Scope = Scope.ALL) -> Grant:
    return Grant(resource=resource, actions=frozenset(actions), scope=scope)


_FULL = ["read", "write", "delete", "execute", "approve", "export"]

DEFAULT_PERMISSION_SETS: tuple[PermissionSet, ...] = (
    PermissionSet(
        id="full-administrator",
        name="Full Administrator",
        description=(
            "Complete system access including user management, project management, "
            "and system settings"
        ),
        grants=tuple(_grant(r, _FULL) for r in sorted(DEFAULT_RESOURCES)),
    ),
    PermissionSet(
        id="user-management-administrator",
        name="User Management Administrator",
        description="Can manage users but not system settings",
        grants=(
            _grant("users", ["read", "write", "delete", "execute"]),
            _grant("projects", ["read", "write"]),
            _grant("reports", ["read"]),
        ),
    ),
    PermissionSet(
        id="project-administrator",
        name="Project Administrator",
        description="Can manage projects and their data",
        grants=(
            _grant("projects", ["read", "write", "delete"]),
            _grant("users", ["read"]),
            _grant("data", ["read", "write"]),
        ),
    ),
    PermissionSet(
        id="data-analyst",
        name="Data Analyst",
        description="Access to data and reporting features",
        grants=(
            _grant("data", ["read", "export"]),
            _grant("reports", ["read", "write", "export"]),
        ),
    ),
    PermissionSet(
        id="ai-specialist",
        name="AI Specialist",
        description="Access to AI features and data management",
        grants=(
            _grant("agents", ["read", "write", "execute"]),
            _grant("workflows", ["read", "write", "execute"]),
            _grant("data", ["read", "write"], Scope.OWN),
        ),
    ),
    PermissionSet(
        id="basic-user",
        name="Basic User",
        description="Limited access to core features",
        grants=(
            _grant("projects", ["read"]),
            _grant("files", ["read", "write"], Scope.OWN),
        ),
    ),
    PermissionSet(
        id="read-only-set",
        name="Read Only",
        description="Read-only access to projects",
        grants=(_grant("projects", ["read"]),),
    ),
    PermissionSet(
        id="guest-user",
        name="Guest User",
        description="Minimal access",
        grants=(_grant("users", ["read"], Scope.OWN),),
    ),
)
