"""
Authenticated identity passed into every service call.
"""
from dataclasses import dataclass
from typing import Union

from taskgate.features.permissions.rbac import Role


@dataclass(frozen=True)
class HasOrganization:
    id: str


@dataclass(frozen=True)
class NoOrganization:
    pass


OrgMembership = Union[HasOrganization, NoOrganization]


def membership_for(organization_id: str | None) -> OrgMembership:
    if organization_id is None:
        return NoOrganization()
    return HasOrganization(organization_id)


@dataclass(frozen=True)
class Actor:
    """
    The caller of a service operation.

    Built from the stored user on every request, so the organization reflects
    the latest state rather than whatever a token claimed.
    """
    id: str
    email: str
    role: Role
    organization: OrgMembership

    @property
    def organization_id(self) -> str | None:
        """Nullable view of the membership, for audit columns and payloads."""
        if isinstance(self.organization, HasOrganization):
            return self.organization.id
        return None

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(
            id=user.id,
            email=user.email,
            role=Role(user.role),
            organization=membership_for(user.organization_id),
        )
