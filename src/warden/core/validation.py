"""Validation of proposed grants against the permission catalog."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from warden.models.catalog import PermissionCatalog
from warden.models.grant import Grant, Scope

logger = logging.getLogger(__name__)

VALID_SCOPES = {s.value for s in Scope}


class ValidationIssue(BaseModel):
    """One problem found in a row of proposed grants."""

    model_config = ConfigDict(frozen=True)

    index: int
    field: str
    value: Any = None
    message: str

    def __str__(self) -> str:
        return f"row {self.index}: {self.message}"


class GrantValidationError(ValueError):
    """Raised when proposed grants do not match the catalog."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__("; ".join(str(i) for i in issues))


def _as_row(grant: Grant | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(grant, Grant):
        return {"resource": grant.resource, "actions": grant.actions, "scope": grant.scope.value}
    return grant


def find_grant_issues(
    grants: Iterable[Grant | Mapping[str, Any]], catalog: PermissionCatalog
) -> list[ValidationIssue]:
    """Return every problem in ``grants``; an empty list means they are valid."""
    issues: list[ValidationIssue] = []
    seen: set[str] = set()

    for index, grant in enumerate(grants):
        if not isinstance(grant, (Grant, Mapping)):
            issues.append(
                ValidationIssue(
                    index=index, field="grant", value=repr(grant), message="Not a grant"
                )
            )
            continue
        row = _as_row(grant)

        resource = row.get("resource")
        if not isinstance(resource, str) or not resource:
            issues.append(
                ValidationIssue(
                    index=index, field="resource", value=resource, message="Missing resource"
                )
            )
        else:
            if resource not in catalog.resources:
                issues.append(
                    ValidationIssue(
                        index=index,
                        field="resource",
                        value=resource,
                        message=f"Invalid resource: {resource}",
                    )
                )
            if resource in seen:
                issues.append(
                    ValidationIssue(
                        index=index,
                        field="resource",
                        value=resource,
                        message=f"Duplicate resource: {resource}",
                    )
                )
            seen.add(resource)

        actions = row.get("actions")
        if actions is None or isinstance(actions, (str, bytes)) or not isinstance(actions, Iterable):
            issues.append(
                ValidationIssue(
                    index=index,
                    field="actions",
                    value=actions,
                    message=f"Actions must be a list for resource {resource}",
                )
            )
        else:
            for action in sorted(actions, key=str):
                if not isinstance(action, str) or action not in catalog.actions:
                    issues.append(
                        ValidationIssue(
                            index=index,
                            field="actions",
                            value=action,
                            message=f"Invalid action: {action} for resource {resource}",
                        )
                    )

        scope = row.get("scope")
        if not isinstance(scope, str) or scope not in VALID_SCOPES:
            issues.append(
                ValidationIssue(
                    index=index,
                    field="scope",
                    value=scope,
                    message=f"Invalid scope: {scope} for resource {resource}",
                )
            )

    if issues:
        logger.debug("Grant validation found %d issue(s)", len(issues))
    return issues


def validate_grants(
    grants: Iterable[Grant | Mapping[str, Any]], catalog: PermissionCatalog
) -> list[Grant]:
    """Check proposed grants and return them as ``Grant`` objects.

    Raises:
        GrantValidationError: With every issue found, not just the first.
    """
    grants = list(grants)
    issues = find_grant_issues(grants, catalog)
    if issues:
        raise GrantValidationError(issues)
    return [g if isinstance(g, Grant) else Grant.model_validate(dict(g)) for g in grants]
