"""
Static role to permission mapping.

Owner and Admin may manage tasks and read audit history; Viewer may only
read tasks. The table is fixed at import time and never mutated.
"""
import enum


class Role(str, enum.Enum):
    """Role held by a user. One per user."""
    OWNER = "owner"
    ADMIN = "admin"
    VIEWER = "viewer"


class Permission(str, enum.Enum):
    """Named capability granted to a role."""
    TASK_CREATE = "task:create"
    TASK_READ = "task:read"
    TASK_UPDATE = "task:update"
    TASK_DELETE = "task:delete"
    AUDIT_READ = "audit:read"


_TASK_MANAGEMENT = frozenset({
    Permission.TASK_CREATE,
    Permission.TASK_READ,
    Permission.TASK_UPDATE,
    Permission.TASK_DELETE,
})

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.OWNER: _TASK_MANAGEMENT | {Permission.AUDIT_READ},
    Role.ADMIN: _TASK_MANAGEMENT | {Permission.AUDIT_READ},
    Role.VIEWER: frozenset({Permission.TASK_READ}),
}


def permissions_for(role: Role | str | None) -> frozenset[Permission]:
    """
    Get the permissions granted to a role.

    Unknown roles get an empty set.
    """
    try:
        role = Role(role)
    except ValueError:
        return frozenset()
    return ROLE_PERMISSIONS.get(role, frozenset())


def has_permission(role: Role | str | None, permission: Permission | str) -> bool:
    """Check whether a role is granted a permission."""
    try:
        permission = Permission(permission)
    except ValueError:
        return False
    return permission in permissions_for(role)
