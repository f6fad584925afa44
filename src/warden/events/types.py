"""Event type constants for Warden."""

from enum import StrEnum


class EventType(StrEnum):
    DIRECT_PERMISSIONS_CHANGED = "principal.permissions_changed"
    PERMISSION_SETS_CHANGED = "principal.permission_sets_changed"
    PROJECT_MEMBERSHIP_CHANGED = "principal.membership_changed"
    GLOBAL_ROLE_CHANGED = "principal.role_changed"

    CATALOG_RELOADED = "catalog.reloaded"


# Events that make one principal's cached grant tables stale
PRINCIPAL_CHANGE_EVENTS = frozenset(
    {
        EventType.DIRECT_PERMISSIONS_CHANGED,
        EventType.PERMISSION_SETS_CHANGED,
        EventType.PROJECT_MEMBERSHIP_CHANGED,
        EventType.GLOBAL_ROLE_CHANGED,
    }
)
