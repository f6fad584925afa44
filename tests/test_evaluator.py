"""Tests for the permission evaluator."""

from __future__ import annotations

import pytest

from warden.config import Config
from warden.core.evaluator import PermissionEvaluator, allowed_actions, can, effective_scope
from warden.models.catalog import PermissionCatalog
from warden.models.grant import Grant, Scope
from warden.models.principal import PrincipalPermissionState, ProjectMembership


def _g(resource: str, actions: set[str], scope: Scope = Scope.ALL) -> Grant:
    return Grant(resource=resource, actions=frozenset(actions), scope=scope)


class TestScenario:
    """A read-only permission set plus an admin membership in one project."""

    def test_global_read_from_permission_set(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        assert evaluator.can(analyst_state, "projects", "read")

    def test_global_write_denied(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        assert not evaluator.can(analyst_state, "projects", "write")

    def test_project_grant_applies_in_project(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        assert evaluator.can(analyst_state, "agents", "execute", project_id="p1")

    def test_project_grant_does_not_leak_globally(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        assert not evaluator.can(analyst_state, "agents", "execute")

    def test_project_grant_does_not_leak_to_other_projects(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        assert not evaluator.can(analyst_state, "agents", "execute", project_id="p2")
        assert evaluator.can(analyst_state, "projects", "read", project_id="p2")

    def test_global_sets_flow_into_project_table(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        assert evaluator.can(analyst_state, "projects", "read", project_id="p1")

    def test_module_level_functions(
        self, catalog: PermissionCatalog, analyst_state: PrincipalPermissionState
    ) -> None:
        assert can(analyst_state, "projects", "read", catalog=catalog)
        assert not can(analyst_state, "agents", "execute", catalog=catalog)
        assert allowed_actions(analyst_state, "agents", "p1", catalog=catalog) == {
            "read",
            "write",
            "execute",
        }
        assert effective_scope(analyst_state, "projects", catalog=catalog) is Scope.ALL


class TestAdminBypass:
    @pytest.mark.parametrize(
        ("resource", "action"),
        [("projects", "delete"), ("nonexistent_resource", "read"), ("data", "frobnicate")],
    )
    def test_admin_can_do_anything(
        self, evaluator: PermissionEvaluator, resource: str, action: str
    ) -> None:
        state = PrincipalPermissionState(global_role="admin", direct_permissions=[])
        assert evaluator.can(state, resource, action)
        assert evaluator.can(state, resource, action, project_id="p1")

    def test_admin_allowed_actions_is_full_catalog(
        self, evaluator: PermissionEvaluator, catalog: PermissionCatalog
    ) -> None:
        state = PrincipalPermissionState(global_role="admin")
        assert evaluator.allowed_actions(state, "anything") == catalog.actions
        assert evaluator.effective_scope(state, "anything") is Scope.ALL
        assert not evaluator.is_explicitly_denied(state, "settings")

    def test_bypass_roles_are_configurable(self, catalog: PermissionCatalog) -> None:
        evaluator = PermissionEvaluator(
            catalog, config=Config(bypass_roles=frozenset({"superadmin"}))
        )
        admin = PrincipalPermissionState(global_role="admin", direct_permissions=[])
        superadmin = PrincipalPermissionState(global_role="superadmin", direct_permissions=[])

        assert not evaluator.can(admin, "projects", "read")
        assert evaluator.can(superadmin, "projects", "read")

    def test_bypass_permission_sets_are_configurable(self, catalog: PermissionCatalog) -> None:
        evaluator = PermissionEvaluator(
            catalog, config=Config(bypass_permission_sets=frozenset({"full-administrator"}))
        )
        holder = PrincipalPermissionState(
            direct_permissions=[], permission_sets=["full-administrator"]
        )
        reader = PrincipalPermissionState(direct_permissions=[], permission_sets=["read-only-set"])

        assert evaluator.is_bypass(holder)
        assert evaluator.can(holder, "nonexistent_resource", "frobnicate")
        assert evaluator.allowed_actions(holder, "settings") == catalog.actions
        assert not evaluator.is_bypass(reader)
        assert not evaluator.can(reader, "settings", "write")

    def test_no_bypass_permission_sets_by_default(self, evaluator: PermissionEvaluator) -> None:
        state = PrincipalPermissionState(
            direct_permissions=[], permission_sets=["full-administrator"]
        )
        assert not evaluator.is_bypass(state)


class TestFailClosed:
    def test_unknown_resource(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        assert not evaluator.can(analyst_state, "nonexistent_resource", "read")
        assert evaluator.allowed_actions(analyst_state, "nonexistent_resource") == frozenset()
        assert evaluator.effective_scope(analyst_state, "nonexistent_resource") is Scope.NONE

    def test_unknown_resource_even_if_granted_directly(
        self, evaluator: PermissionEvaluator
    ) -> None:
        state = PrincipalPermissionState(direct_permissions=[_g("secrets", {"read"})])
        assert not evaluator.can(state, "secrets", "read")

    def test_unknown_action(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        assert not evaluator.can(analyst_state, "projects", "teleport")

    def test_unknown_permission_set_drops_set_grants(
        self, evaluator: PermissionEvaluator
    ) -> None:
        state = PrincipalPermissionState(
            direct_permissions=[_g("files", {"read"})],
            permission_sets=["read-only-set", "ghost"],
        )
        assert evaluator.can(state, "files", "read")
        assert not evaluator.can(state, "projects", "read")

    def test_explicit_none_denies(self, evaluator: PermissionEvaluator) -> None:
        state = PrincipalPermissionState(direct_permissions=[_g("settings", {"read"}, Scope.NONE)])
        assert not evaluator.can(state, "settings", "read")
        assert evaluator.allowed_actions(state, "settings") == frozenset()
        assert evaluator.effective_scope(state, "settings") is Scope.NONE
        assert evaluator.is_explicitly_denied(state, "settings")
        assert not evaluator.is_explicitly_denied(state, "users")


class TestScopes:
    def test_requested_own_satisfied_by_all(self, evaluator: PermissionEvaluator) -> None:
        state = PrincipalPermissionState(direct_permissions=[_g("data", {"write"})])
        assert evaluator.can(state, "data", "write", scope="own")
        assert evaluator.can(state, "data", "write", scope=Scope.ALL)

    def test_requested_all_not_satisfied_by_own(self, evaluator: PermissionEvaluator) -> None:
        state = PrincipalPermissionState(direct_permissions=[_g("data", {"write"}, Scope.OWN)])
        assert evaluator.can(state, "data", "write")
        assert evaluator.can(state, "data", "write", scope="own")
        assert not evaluator.can(state, "data", "write", scope="all")

    def test_invalid_requested_scope_denies(self, evaluator: PermissionEvaluator) -> None:
        state = PrincipalPermissionState(direct_permissions=[_g("data", {"write"})])
        assert not evaluator.can(state, "data", "write", scope="everything")

    def test_requested_none_scope_denies(self, evaluator: PermissionEvaluator) -> None:
        state = PrincipalPermissionState(direct_permissions=[_g("data", {"write"})])
        assert evaluator.can(state, "data", "write")
        assert not evaluator.can(state, "data", "write", scope="none")
        assert not evaluator.can(state, "data", "write", scope=Scope.NONE)

    def test_effective_scope_merges_sources(self, evaluator: PermissionEvaluator) -> None:
        state = PrincipalPermissionState(
            direct_permissions=[_g("projects", {"write"}, Scope.OWN)],
            permission_sets=["read-only-set"],
        )
        assert evaluator.effective_scope(state, "projects") is Scope.ALL
        assert evaluator.allowed_actions(state, "projects") == {"read", "write"}


class TestTemplateSeeding:
    def test_principal_without_records_gets_global_template(
        self, evaluator: PermissionEvaluator
    ) -> None:
        state = PrincipalPermissionState(global_role="guest")
        assert evaluator.can(state, "projects", "read")
        assert not evaluator.can(state, "projects", "write")

    def test_explicit_empty_grants_are_authoritative(
        self, evaluator: PermissionEvaluator
    ) -> None:
        state = PrincipalPermissionState(global_role="guest", direct_permissions=[])
        assert not evaluator.can(state, "projects", "read")

    def test_membership_without_grants_uses_role_template(
        self, evaluator: PermissionEvaluator
    ) -> None:
        state = PrincipalPermissionState(
            direct_permissions=[],
            project_memberships=[ProjectMembership(project_id="p1", role="member")],
        )
        assert evaluator.can(state, "data", "write", project_id="p1", scope="own")
        assert not evaluator.can(state, "data", "write", project_id="p1", scope="all")
        assert not evaluator.can(state, "data", "delete", project_id="p1")

    def test_membership_with_explicit_grants_ignores_template(
        self, evaluator: PermissionEvaluator
    ) -> None:
        state = PrincipalPermissionState(
            direct_permissions=[],
            project_memberships=[
                ProjectMembership(project_id="p1", role="owner", grants=[_g("files", {"read"})])
            ],
        )
        assert evaluator.can(state, "files", "read", project_id="p1")
        assert not evaluator.can(state, "projects", "delete", project_id="p1")

    def test_seeding_can_be_disabled(self, catalog: PermissionCatalog) -> None:
        evaluator = PermissionEvaluator(catalog, config=Config(seed_from_templates=False))
        state = PrincipalPermissionState(
            global_role="user",
            project_memberships=[ProjectMembership(project_id="p1", role="owner")],
        )
        assert not evaluator.can(state, "agents", "read")
        assert not evaluator.can(state, "agents", "read", project_id="p1")


class TestBulkQueries:
    def test_shorthands(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        assert evaluator.can_read(analyst_state, "projects")
        assert not evaluator.can_write(analyst_state, "projects")
        assert evaluator.can_write(analyst_state, "agents", project_id="p1")
        assert not evaluator.can_delete(analyst_state, "agents", project_id="p1")
        assert evaluator.can_execute(analyst_state, "agents", project_id="p1")

    def test_has_any_and_has_all(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        checks = [("projects", "read"), ("projects", "write")]
        assert evaluator.has_any(analyst_state, checks)
        assert not evaluator.has_all(analyst_state, checks)
        assert evaluator.has_all(analyst_state, [("projects", "read")])
        assert not evaluator.has_any(analyst_state, [])
        assert evaluator.has_all(analyst_state, [])

    def test_summary(
        self, evaluator: PermissionEvaluator, analyst_state: PrincipalPermissionState
    ) -> None:
        summary = evaluator.summary(analyst_state, project_id="p1")
        assert summary.resources_with_access == ("agents", "projects")
        assert summary.total_actions == 4
        assert summary.most_permissive_resource == "agents"

    def test_summary_for_admin_covers_catalog(
        self, evaluator: PermissionEvaluator, catalog: PermissionCatalog
    ) -> None:
        summary = evaluator.summary(PrincipalPermissionState(global_role="admin"))
        assert summary.total_resources == len(catalog.resources)
