"""
Seed script to populate a demo tenant.

Creates, through the regular services so every step is audited:
- an Owner with a root organization
- a child organization under that root
- an Admin and a Viewer in the child organization
- one task in each organization

Usage:
    python -m scripts.seed_demo
"""
import asyncio

from taskgate.core.database.engine import AsyncSessionLocal, init_db
from taskgate.features.organizations.service import OrganizationService
from taskgate.features.permissions.identity import Actor
from taskgate.features.permissions.rbac import Role
from taskgate.features.tasks.schemas import TaskCreate
from taskgate.features.tasks.service import TaskService
from taskgate.features.users.schemas import SignupRequest
from taskgate.features.users.service import AuthService, SignupPolicy
from taskgate.utils import get_logger


log = get_logger(__name__)

DEMO_PASSWORD = "demo-password"
DEMO_USERS = {
    Role.OWNER: "owner@demo-corp.com",
    Role.ADMIN: "admin@demo-corp.com",
    Role.VIEWER: "viewer@demo-corp.com",
}


async def seed(db) -> None:
    auth = AuthService(db, policy=SignupPolicy.OPTIONAL_ORGANIZATION)

    if await auth.get_by_email(DEMO_USERS[Role.OWNER]) is not None:
        log.info("Demo data already present, skipping")
        return

    signup = await auth.signup(SignupRequest(email=DEMO_USERS[Role.OWNER], password=DEMO_PASSWORD, role=Role.OWNER))
    owner = Actor.from_user(await auth.get_by_id(signup.user.id))

    organizations = OrganizationService(db)
    root = await organizations.create("Demo Corp", None, owner)
    owner = Actor.from_user(await auth.get_by_id(owner.id))
    child = await organizations.create("Demo Corp Support", root.id, owner)
    log.info("Created root organization %s and child %s", root.id, child.id)

    for role in (Role.ADMIN, Role.VIEWER):
        await auth.signup(SignupRequest(
            email=DEMO_USERS[role],
            password=DEMO_PASSWORD,
            role=role,
            organization_id=child.id,
        ))
        log.info("Created %s %s", role.value, DEMO_USERS[role])

    tasks = TaskService(db)
    await tasks.create(TaskCreate(title="Plan quarterly roadmap"), owner)
    await tasks.create(TaskCreate(title="Triage support inbox", organization_id=child.id), owner)


async def main():
    log.info("Initializing database tables...")
    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            await seed(db)
            await db.commit()
        except Exception as e:
            log.error(f"Error seeding demo data: {e}", exc_info=True)
            await db.rollback()
            raise

    log.info("Demo seeding completed. Password for all demo users: %s", DEMO_PASSWORD)


if __name__ == "__main__":
    asyncio.run(main())
