"""Grant merger — combines grant sources into one effective table per resource."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict

from warden.models.grant import Grant, Scope

logger = logging.getLogger(__name__)


class PermissionSummary(BaseModel):
    """Display-oriented digest of an effective grant table."""

    model_config = ConfigDict(frozen=True)

    total_resources: int
    total_actions: int
    resources_with_access: tuple[str, ...]
    most_permissive_resource: str | None


class EffectiveGrantTable:
    """Merged, queryable grants for one principal context.

    A resource missing from the table has no grant at all. A resource present
    with ``Scope.NONE`` was explicitly denied by every source that mentioned it.
    """

    def __init__(self, grants: dict[str, Grant], *, project_id: str | None = None) -> None:
        self._grants = dict(grants)
        self.project_id = project_id

    @property
    def is_project_table(self) -> bool:
        return self.project_id is not None

    def get(self, resource: str) -> Grant | None:
        return self._grants.get(resource)

    def resources(self) -> list[str]:
        return sorted(self._grants)

    def is_explicitly_denied(self, resource: str) -> bool:
        grant = self._grants.get(resource)
        return grant is not None and grant.scope is Scope.NONE

    def to_dict(self) -> dict[str, Any]:
        """Deterministic plain-data form, independent of merge order."""
        return {
            "project_id": self.project_id,
            "grants": {r: self._grants[r].to_response() for r in sorted(self._grants)},
        }

    def summary(self) -> PermissionSummary:
        granted = [g for g in self._grants.values() if g.scope is not Scope.NONE and g.actions]
        granted.sort(key=lambda g: g.resource)
        most = max(granted, key=lambda g: len(g.actions), default=None)
        return PermissionSummary(
            total_resources=len(granted),
            total_actions=sum(len(g.actions) for g in granted),
            resources_with_access=tuple(g.resource for g in granted),
            most_permissive_resource=most.resource if most else None,
        )

    def __contains__(self, resource: object) -> bool:
        return resource in self._grants

    def __iter__(self) -> Iterator[Grant]:
        return (self._grants[r] for r in sorted(self._grants))

    def __len__(self) -> int:
        return len(self._grants)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EffectiveGrantTable):
            return NotImplemented
        return self.project_id == other.project_id and self._grants == other._grants

    def __repr__(self) -> str:
        return f"EffectiveGrantTable(project_id={self.project_id!r}, resources={self.resources()})"


def combine(grants: Iterable[Grant]) -> dict[str, Grant]:
    """Fold grants into one grant per resource.

    Actions are unioned across every non-``none`` grant. The merged scope is the
    broadest one contributed, so ``all`` subsumes ``own`` and ``none`` only
    survives when nothing else was granted for that resource.
    """
    actions: dict[str, set[str]] = defaultdict(set)
    scopes: dict[str, Scope] = {}

    for grant in grants:
        current = scopes.get(grant.resource)
        if current is None or grant.scope.rank > current.rank:
            scopes[grant.resource] = grant.scope
        if grant.scope is not Scope.NONE:
            actions[grant.resource].update(grant.actions)

    return {
        resource: Grant(
            resource=resource,
            actions=frozenset(actions.get(resource, ())) if scope is not Scope.NONE else frozenset(),
            scope=scope,
        )
        for resource, scope in scopes.items()
    }


def merge_grants(
    direct: Iterable[Grant],
    from_sets: Iterable[Grant],
    from_project: Iterable[Grant] | None = None,
    *,
    project_id: str | None = None,
) -> EffectiveGrantTable:
    """Merge the grant sources of one principal into an effective table.

    Pass ``project_id`` to build a project table; without it the result is the
    global table. Source order does not affect the result.
    """
    sources: list[Grant] = [*direct, *from_sets]
    if from_project is not None:
        sources.extend(from_project)

    table = EffectiveGrantTable(combine(sources), project_id=project_id)
    logger.debug(
        "Merged %d grants into %d resources (project=%s)", len(sources), len(table), project_id
    )
    return table
