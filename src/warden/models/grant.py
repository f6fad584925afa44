"""Grant and scope models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Scope(StrEnum):
    """How broadly a grant's actions apply over instances of a resource."""

    ALL = "all"
    OWN = "own"
    NONE = "none"

    @property
    def rank(self) -> int:
        return _SCOPE_RANK[self]

    def covers(self, requested: Scope) -> bool:
        """Return True if this scope satisfies a request for ``requested``."""
        if self is Scope.NONE:
            return False
        return self.rank >= requested.rank


_SCOPE_RANK = {Scope.NONE: 0, Scope.OWN: 1, Scope.ALL: 2}


class Grant(BaseModel):
    """Access to a set of actions on one resource."""

    model_config = ConfigDict(frozen=True)

    resource: str
    actions: frozenset[str] = Field(default_factory=frozenset)
    scope: Scope = Scope.ALL

    def allows(self, action: str) -> bool:
        return self.scope is not Scope.NONE and action in self.actions

    def to_response(self) -> dict:
        return {
            "resource": self.resource,
            "actions": sorted(self.actions),
            "scope": self.scope.value,
        }


class PermissionSet(BaseModel):
    """A named, reusable bundle of grants defined by the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = "Custom permission set"
    grants: tuple[Grant, ...] = ()
