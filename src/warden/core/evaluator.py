"""Evaluation of point and bulk access queries.

Queries never raise. Anything the evaluator does not recognize resolves to
"deny", so gating code can pass arbitrary strings.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from warden.config import Config
from warden.core.merger import EffectiveGrantTable, PermissionSummary, merge_grants
from warden.core.resolver import UnknownPermissionSetError, resolve_permission_sets
from warden.core.templates import default_grants_for_role
from warden.models.catalog import PermissionCatalog
from warden.models.grant import Grant, Scope
from warden.models.principal import PrincipalPermissionState

if TYPE_CHECKING:
    from warden.cache import GrantTableCache

logger = logging.getLogger(__name__)


class PermissionEvaluator:
    """Evaluates principals against one catalog snapshot."""

    def __init__(
        self,
        catalog: PermissionCatalog,
        *,
        config: Config | None = None,
        cache: GrantTableCache | None = None,
    ) -> None:
        self.catalog = catalog
        self.config = config or Config()
        self.cache = cache

    def is_bypass(self, state: PrincipalPermissionState) -> bool:
        """True for bypass roles and holders of a bypass permission set."""
        if state.global_role in self.config.bypass_roles:
            return True
        return bool(self.config.bypass_permission_sets & (state.permission_sets or frozenset()))

    # Grant tables

    def global_table(self, state: PrincipalPermissionState) -> EffectiveGrantTable:
        """Effective table for checks made outside any project."""
        return self._table(state, None)

    def project_table(
        self, state: PrincipalPermissionState, project_id: str
    ) -> EffectiveGrantTable:
        """Effective table for checks inside ``project_id``.

        Combines the global sources with the grants of that project's membership.
        A principal who is not a member gets only the global sources.
        """
        return self._table(state, project_id)

    def _table(
        self, state: PrincipalPermissionState, project_id: str | None
    ) -> EffectiveGrantTable:
        if self.cache is None:
            return self._build(state, project_id)
        return self.cache.get_or_build(
            self.cache_key(state, project_id), lambda: self._build(state, project_id)
        )

    def cache_key(self, state: PrincipalPermissionState, project_id: str | None) -> tuple:
        """Key naming every input a grant table depends on."""
        return (
            state.principal_id,
            project_id,
            state,
            self.catalog,
            self.config.seed_from_templates,
        )

    def _build(
        self, state: PrincipalPermissionState, project_id: str | None
    ) -> EffectiveGrantTable:
        direct, from_sets = self._global_sources(state)
        if project_id is None:
            return merge_grants(direct, from_sets)
        return merge_grants(
            direct, from_sets, self._project_sources(state, project_id), project_id=project_id
        )

    def _global_sources(
        self, state: PrincipalPermissionState
    ) -> tuple[Iterable[Grant], Iterable[Grant]]:
        if not state.has_explicit_grants and self.config.seed_from_templates:
            return default_grants_for_role(state.global_role, kind="global"), ()

        try:
            from_sets = resolve_permission_sets(state.permission_sets or (), self.catalog)
        except UnknownPermissionSetError as e:
            logger.warning("Ignoring permission sets of %s: %s", state.principal_id, e)
            from_sets = frozenset()
        return state.direct_permissions or (), from_sets

    def _project_sources(
        self, state: PrincipalPermissionState, project_id: str
    ) -> Iterable[Grant] | None:
        membership = state.membership(project_id)
        if membership is None:
            return None
        if membership.grants is None:
            if not self.config.seed_from_templates:
                return ()
            return default_grants_for_role(membership.role, kind="project")
        return membership.grants

    # Queries

    def _lookup(
        self, state: PrincipalPermissionState, resource: str, project_id: str | None
    ) -> Grant | None:
        if resource not in self.catalog.resources:
            return None
        grant = self._table(state, project_id).get(resource)
        if grant is None or grant.scope is Scope.NONE:
            return None
        return grant

    def can(
        self,
        state: PrincipalPermissionState,
        resource: str,
        action: str,
        project_id: str | None = None,
        *,
        scope: Scope | str | None = None,
    ) -> bool:
        """Return True if the principal may perform ``action`` on ``resource``.

        With ``scope``, the merged scope must also cover the requested one:
        ``all`` covers ``own``, but ``own`` does not cover ``all``.
        """
        if self.is_bypass(state):
            return True

        grant = self._lookup(state, resource, project_id)
        if grant is None or action not in self.catalog.actions or not grant.allows(action):
            logger.debug(
                "Denied %s %s:%s (project=%s)", state.principal_id, resource, action, project_id
            )
            return False

        if scope is not None:
            try:
                requested = Scope(scope)
            except ValueError:
                return False
            if requested is Scope.NONE:
                return False
            return grant.scope.covers(requested)
        return True

    def allowed_actions(
        self, state: PrincipalPermissionState, resource: str, project_id: str | None = None
    ) -> frozenset[str]:
        """Every action the principal may perform on ``resource``."""
        if self.is_bypass(state):
            return self.catalog.actions
        grant = self._lookup(state, resource, project_id)
        if grant is None:
            return frozenset()
        return grant.actions & self.catalog.actions

    def effective_scope(
        self, state: PrincipalPermissionState, resource: str, project_id: str | None = None
    ) -> Scope:
        if self.is_bypass(state):
            return Scope.ALL
        if resource not in self.catalog.resources:
            return Scope.NONE
        grant = self._table(state, project_id).get(resource)
        return grant.scope if grant is not None else Scope.NONE

    def is_explicitly_denied(
        self, state: PrincipalPermissionState, resource: str, project_id: str | None = None
    ) -> bool:
        """True when sources mention ``resource`` but only ever with scope ``none``."""
        if self.is_bypass(state):
            return False
        return self._table(state, project_id).is_explicitly_denied(resource)

    def can_read(self, state: PrincipalPermissionState, resource: str, **kwargs: Any) -> bool:
        return self.can(state, resource, "read", **kwargs)

    def can_write(self, state: PrincipalPermissionState, resource: str, **kwargs: Any) -> bool:
        return self.can(state, resource, "write", **kwargs)

    def can_delete(self, state: PrincipalPermissionState, resource: str, **kwargs: Any) -> bool:
        return self.can(state, resource, "delete", **kwargs)

    def can_execute(self, state: PrincipalPermissionState, resource: str, **kwargs: Any) -> bool:
        return self.can(state, resource, "execute", **kwargs)

    def has_any(
        self,
        state: PrincipalPermissionState,
        checks: Iterable[tuple[str, str]],
        project_id: str | None = None,
    ) -> bool:
        """True if any ``(resource, action)`` pair is allowed."""
        return any(self.can(state, r, a, project_id) for r, a in checks)

    def has_all(
        self,
        state: PrincipalPermissionState,
        checks: Iterable[tuple[str, str]],
        project_id: str | None = None,
    ) -> bool:
        """True if every ``(resource, action)`` pair is allowed."""
        return all(self.can(state, r, a, project_id) for r, a in checks)

    def summary(
        self, state: PrincipalPermissionState, project_id: str | None = None
    ) -> PermissionSummary:
        if self.is_bypass(state):
            resources = tuple(sorted(self.catalog.resources))
            return PermissionSummary(
                total_resources=len(resources),
                total_actions=len(resources) * len(self.catalog.actions),
                resources_with_access=resources,
                most_permissive_resource=resources[0] if resources else None,
            )
        return self._table(state, project_id).summary()


def can(
    state: PrincipalPermissionState,
    resource: str,
    action: str,
    project_id: str | None = None,
    *,
    catalog: PermissionCatalog,
    scope: Scope | str | None = None,
) -> bool:
    return PermissionEvaluator(catalog).can(state, resource, action, project_id, scope=scope)


def allowed_actions(
    state: PrincipalPermissionState,
    resource: str,
    project_id: str | None = None,
    *,
    catalog: PermissionCatalog,
) -> frozenset[str]:
    return PermissionEvaluator(catalog).allowed_actions(state, resource, project_id)


def effective_scope(
    state: PrincipalPermissionState,
    resource: str,
    project_id: str | None = None,
    *,
    catalog: PermissionCatalog,
) -> Scope:
    return PermissionEvaluator(catalog).effective_scope(state, resource, project_id)
