"""Warden — permission evaluation for roles, permission sets and project grants."""

from warden.cache import GrantTableCache
from warden.config import Config
from warden.core import (
    EffectiveGrantTable,
    GrantValidationError,
    PermissionEvaluator,
    UnknownPermissionSetError,
    allowed_actions,
    can,
    default_grants_for_role,
    effective_scope,
    find_grant_issues,
    merge_grants,
    resolve_permission_sets,
    validate_grants,
)
from warden.models import (
    Grant,
    PermissionCatalog,
    PermissionSet,
    PrincipalPermissionState,
    ProjectMembership,
    Scope,
)

__version__ = "0.1.0"

__all__ = [
    "Config",
    "EffectiveGrantTable",
    "Grant",
    "GrantTableCache",
    "GrantValidationError",
    "PermissionCatalog",
    "PermissionEvaluator",
    "PermissionSet",
    "PrincipalPermissionState",
    "ProjectMembership",
    "Scope",
    "UnknownPermissionSetError",
    "allowed_actions",
    "can",
    "default_grants_for_role",
    "effective_scope",
    "find_grant_issues",
    "merge_grants",
    "resolve_permission_sets",
    "validate_grants",
]
