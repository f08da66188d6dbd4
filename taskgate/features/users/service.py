"""
Signup, login and credential validation.

Signup behaviour depends on the configured SignupPolicy:

- require_organization: an existing organization must be chosen
- optional_organization: the organization may be omitted; the user starts
  without one (an Owner then creates a root organization)
- auto_create_organization: when omitted, a root organization is created
  for the user
"""
import enum
from collections.abc import Sequence
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core import config
from taskgate.core.errors import BadRequest, Conflict
from taskgate.features.audit.service import AuditRecorder
from taskgate.features.organizations.dependencies import get_organization
from taskgate.features.organizations.models import Organization
from taskgate.features.permissions.rbac import Role
from taskgate.features.users.auth import create_access_token, hash_password, verify_password
from taskgate.features.users.models import User
from taskgate.features.users.schemas import SignupRequest, SignupResponse, UserResponse
from taskgate.utils import get_logger


log = get_logger(__name__)


class SignupPolicy(str, enum.Enum):
    REQUIRE_ORGANIZATION = "require_organization"
    OPTIONAL_ORGANIZATION = "optional_organization"
    AUTO_CREATE_ORGANIZATION = "auto_create_organization"


class AuthService:

    def __init__(
        self,
        db: AsyncSession,
        audit: AuditRecorder | None = None,
        policy: SignupPolicy | None = None,
    ):
        self.db = db
        self.audit = audit or AuditRecorder(db)
        self.policy = policy or SignupPolicy(config.SIGNUP_POLICY)

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def signup(self, dto: SignupRequest) -> SignupResponse:
        """
        Register a user and log them in.

        Raises:
            Conflict: If the email is already registered
            BadRequest: If the organization choice violates the signup policy
        """
        if await self.get_by_email(dto.email) is not None:
            raise Conflict("Email already registered")

        role = dto.role or Role.VIEWER
        organization_id = await self._resolve_signup_organization(dto.organization_id, role)

        user = User(
            email=dto.email,
            password_hash=hash_password(dto.password),
            role=role,
            organization_id=organization_id,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Email already registered")

        if organization_id is None and self.policy == SignupPolicy.AUTO_CREATE_ORGANIZATION:
            await self._create_default_organization(user)

        await self.audit.log(
            user.id,
            user.organization_id,
            "user:signup",
            "user",
            user.id,
            {"email": user.email},
        )

        access_token = await self.login(user)
        return SignupResponse(access_token=access_token, user=UserResponse.model_validate(user))

    async def validate_user(self, email: str, password: str) -> User | None:
        """Return the user if the credentials match, otherwise None."""
        user = await self.get_by_email(email)
        if user is None:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def login(self, user: User) -> str:
        """Record the login and issue a session token."""
        await self.audit.log(
            user.id,
            user.organization_id,
            "user:login",
            "user",
            user.id,
            {"email": user.email},
        )
        return create_access_token(user.id, user.email, user.role.value, user.organization_id)

    async def organizations_for_signup(self, role: Role | None = None) -> Sequence[Organization]:
        """
        Organizations a new user may pick at signup.

        Admins and Viewers only see child organizations; Owners see all.
        """
        stmt = select(Organization).order_by(Organization.name)
        if role in (Role.ADMIN, Role.VIEWER):
            stmt = stmt.where(Organization.parent_id.is_not(None))
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def _resolve_signup_organization(self, organization_id: str | None, role: Role) -> str | None:
        if organization_id is None:
            if self.policy == SignupPolicy.REQUIRE_ORGANIZATION:
                raise BadRequest("organizationId is required")
            return None

        org = await get_organization(self.db, organization_id)
        if org is None:
            raise BadRequest("Organization not found")
        if role == Role.ADMIN and org.is_root:
            raise BadRequest("Admin must belong to a child organization. Select a sub-organization instead.")
        return org.id

    async def _create_default_organization(self, user: User) -> None:
        org = Organization(name=f"{user.email}'s organization", parent_id=None)
        self.db.add(org)
        await self.db.flush()

        user.organization_id = org.id
        await self.db.flush()

        await self.audit.log(
            user.id,
            org.id,
            "organization:create",
            "organization",
            org.id,
            {"name": org.name, "parentId": None},
        )
        log.info("Created default organization %s for %s", org.id, user.email)
