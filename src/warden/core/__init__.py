"""Permission evaluation core."""

from warden.core.evaluator import PermissionEvaluator, allowed_actions, can, effective_scope
from warden.core.merger import EffectiveGrantTable, PermissionSummary, merge_grants
from warden.core.resolver import UnknownPermissionSetError, resolve_permission_sets
from warden.core.templates import default_grants_for_role, role_rank
from warden.core.validation import (
    GrantValidationError,
    ValidationIssue,
    find_grant_issues,
    validate_grants,
)

__all__ = [
    "EffectiveGrantTable",
    "GrantValidationError",
    "PermissionEvaluator",
    "PermissionSummary",
    "UnknownPermissionSetError",
    "ValidationIssue",
    "allowed_actions",
    "can",
    "default_grants_for_role",
    "effective_scope",
    "find_grant_issues",
    "merge_grants",
    "resolve_permission_sets",
    "role_rank",
    "validate_grants",
]
