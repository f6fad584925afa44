"""Principal permission state and project membership models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from warden.models.grant import Grant


class ProjectMembership(BaseModel):
    """Binds a principal to a project with a coarse role and explicit grants.

    ``grants`` is None when nothing has been recorded for the membership yet;
    the role template is used as a seed in that case. An explicit list, even an
    empty one, is authoritative.
    """

    model_config = ConfigDict(frozen=True)

    project_id: str
    role: str = "member"
    grants: tuple[Grant, ...] | None = None
    joined_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())


class PrincipalPermissionState(BaseModel):
    """Everything needed to evaluate one principal's access.

    The host bumps ``version`` whenever any input changes so cached grant
    tables keyed on it go stale.
    """

    model_config = ConfigDict(frozen=True)

    principal_id: str = "anonymous"
    version: int = 0
    global_role: str = "user"
    direct_permissions: tuple[Grant, ...] | None = None
    permission_sets: frozenset[str] | None = None
    project_memberships: tuple[ProjectMembership, ...] = ()

    @property
    def has_explicit_grants(self) -> bool:
        return self.direct_permissions is not None or self.permission_sets is not None

    def membership(self, project_id: str) -> ProjectMembership | None:
        for m in self.project_memberships:
            if m.project_id == project_id:
                return m
        return None

    def with_permission_set(self, set_id: str) -> PrincipalPermissionState:
        """Return a new state with ``set_id`` added to the permission sets."""
        current = self.permission_sets or frozenset()
        return self.model_copy(
            update={"permission_sets": current | {set_id}, "version": self.version + 1}
        )

    def without_permission_set(self, set_id: str) -> PrincipalPermissionState:
        """Return a new state with ``set_id`` removed from the permission sets."""
        current = self.permission_sets or frozenset()
        return self.model_copy(
            update={"permission_sets": current - {set_id}, "version": self.version + 1}
        )

    def to_response(self) -> dict:
        return {
            "principal_id": self.principal_id,
            "version": self.version,
            "global_role": self.global_role,
            "permission_sets": sorted(self.permission_sets or ()),
            "projects": [m.project_id for m in self.project_memberships],
        }
