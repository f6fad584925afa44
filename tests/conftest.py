"""Shared test fixtures for Warden."""

from __future__ import annotations

from pathlib import Path

import pytest

from warden.config import Config
from warden.core.evaluator import PermissionEvaluator
from warden.models.catalog import PermissionCatalog
from warden.models.grant import Grant, Scope
from warden.models.principal import PrincipalPermissionState, ProjectMembership


@pytest.fixture
def catalog() -> PermissionCatalog:
    return PermissionCatalog.default()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(home_path=tmp_path)


@pytest.fixture
def evaluator(catalog: PermissionCatalog, config: Config) -> PermissionEvaluator:
    return PermissionEvaluator(catalog, config=config)


@pytest.fixture
def analyst_state() -> PrincipalPermissionState:
    """A user with one read-only permission set and an admin membership in p1."""
    return PrincipalPermissionState(
        principal_id="u-1",
        global_role="user",
        direct_permissions=[],
        permission_sets=["read-only-set"],
        project_memberships=[
            ProjectMembership(
                project_id="p1",
                role="admin",
                grants=[
                    Grant(
                        resource="agents",
                        actions=frozenset({"read", "write", "execute"}),
                        scope=Scope.ALL,
                    )
                ],
            )
        ],
    )
