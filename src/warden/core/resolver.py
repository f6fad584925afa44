"""Expansion of permission set ids into concrete grants."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from warden.core.merger import combine
from warden.models.catalog import PermissionCatalog
from warden.models.grant import Grant

logger = logging.getLogger(__name__)


class UnknownPermissionSetError(LookupError):
    """Raised when a permission set id is not defined in the catalog."""

    def __init__(self, set_ids: list[str]) -> None:
        self.set_ids = set_ids
        self.set_id = set_ids[0]
        super().__init__(f"Unknown permission set(s): {', '.join(set_ids)}")


def resolve_permission_sets(ids: Iterable[str], catalog: PermissionCatalog) -> frozenset[Grant]:
    """Return the grants contained in the referenced permission sets.

    Grants that target the same resource across sets are merged with the usual
    union rule, so the result holds one grant per resource.

    Raises:
        UnknownPermissionSetError: If any id is missing from the catalog. Nothing
            is resolved in that case.
    """
    ids = sorted(set(ids))
    missing = [set_id for set_id in ids if catalog.get_set(set_id) is None]
    if missing:
        raise UnknownPermissionSetError(missing)

    grants: list[Grant] = []
    for set_id in ids:
        permission_set = catalog.get_set(set_id)
        grants.extend(permission_set.grants)  # type: ignore[union-attr]

    merged = combine(grants)
    logger.debug("Resolved %d permission set(s) into %d grants", len(ids), len(merged))
    return frozenset(merged.values())
