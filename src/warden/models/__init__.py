"""Warden data models."""

from warden.models.catalog import CatalogError, PermissionCatalog
from warden.models.grant import Grant, PermissionSet, Scope
from warden.models.principal import PrincipalPermissionState, ProjectMembership

__all__ = [
    "CatalogError",
    "Grant",
    "PermissionCatalog",
    "PermissionSet",
    "PrincipalPermissionState",
    "ProjectMembership",
    "Scope",
]
