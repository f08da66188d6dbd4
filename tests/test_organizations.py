# tests/test_organizations.py: Organization creation, listing and removal rules
import pytest
from sqlalchemy import select, func
from sqlalchemy.orm import aliased

from taskgate.core.errors import BadRequest, Conflict, Forbidden, NotFound
from taskgate.features.audit.models import AuditLog
from taskgate.features.organizations.models import Organization
from taskgate.features.organizations.service import OrganizationService
from taskgate.features.permissions.rbac import Role
from taskgate.features.users.models import User
from tests.conftest import actor_for, make_org, make_task, make_user


async def count(db, model):
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def audit_rows(db, action):
    result = await db.execute(select(AuditLog).where(AuditLog.action == action))
    return result.scalars().all()


async def reload_user(db, user_id):
    result = await db.execute(select(User).where(User.id == user_id).execution_options(populate_existing=True))
    return result.scalar_one()


@pytest.mark.asyncio
class TestCreateOrganization:
    async def test_owner_without_organization_creates_root(self, db_session):
        owner = await make_user(db_session, "founder@acme.com", Role.OWNER)

        org = await OrganizationService(db_session).create("Acme", None, actor_for(owner))

        assert org.name == "Acme"
        assert org.parent_id is None
        assert (await reload_user(db_session, owner.id)).organization_id == org.id

        rows = await audit_rows(db_session, "organization:create")
        assert len(rows) == 1
        assert rows[0].resource_id == org.id
        assert rows[0].organization_id == org.id
        assert rows[0].details == {"name": "Acme", "parentId": None}

    async def test_root_owner_creates_child(self, db_session, tenant):
        root = tenant["root"]

        child = await OrganizationService(db_session).create("Sub", root.id, actor_for(tenant["owner"]))

        assert child.parent_id == root.id
        rows = await audit_rows(db_session, "organization:create")
        assert [r.resource_id for r in rows] == [child.id]

    async def test_root_owner_creates_child_without_explicit_parent(self, db_session, tenant):
        child = await OrganizationService(db_session).create("Sub", None, actor_for(tenant["owner"]))
        assert child.parent_id == tenant["root"].id

    async def test_admin_is_forbidden(self, db_session, tenant):
        orgs_before = await count(db_session, Organization)

        with pytest.raises(Forbidden):
            await OrganizationService(db_session).create("Nope", None, actor_for(tenant["admin"]))

        assert await count(db_session, Organization) == orgs_before
        assert await count(db_session, AuditLog) == 0

    async def test_viewer_without_organization_is_forbidden(self, db_session):
        viewer = await make_user(db_session, "v@acme.com", Role.VIEWER)
        with pytest.raises(Forbidden):
            await OrganizationService(db_session).create("Nope", None, actor_for(viewer))
        assert await count(db_session, Organization) == 0

    async def test_owner_of_child_cannot_create(self, db_session, tenant):
        child_owner = await make_user(db_session, "child-owner@acme.com", Role.OWNER, tenant["child"])
        with pytest.raises(Forbidden, match="root organization"):
            await OrganizationService(db_session).create("Grandchild", None, actor_for(child_owner))
        assert await count(db_session, AuditLog) == 0

    async def test_first_organization_cannot_have_parent(self, db_session, tenant):
        owner = await make_user(db_session, "founder@acme.com", Role.OWNER)
        with pytest.raises(Conflict):
            await OrganizationService(db_session).create("Acme", tenant["root"].id, actor_for(owner))
        assert (await reload_user(db_session, owner.id)).organization_id is None

    async def test_never_creates_third_level(self, db_session, tenant):
        orgs_before = await count(db_session, Organization)

        with pytest.raises(Conflict):
            await OrganizationService(db_session).create("Grandchild", tenant["child"].id, actor_for(tenant["owner"]))

        assert await count(db_session, Organization) == orgs_before
        parent = aliased(Organization)
        depth_three = await db_session.execute(
            select(func.count())
            .select_from(Organization)
            .join(parent, Organization.parent_id == parent.id)
            .where(parent.parent_id.is_not(None))
        )
        assert depth_three.scalar_one() == 0

    async def test_parent_must_be_own_root(self, db_session, tenant):
        with pytest.raises(BadRequest):
            await OrganizationService(db_session).create("Sub", tenant["other_root"].id, actor_for(tenant["owner"]))


@pytest.mark.asyncio
class TestListOrganizations:
    async def test_root_owner_sees_root_and_children(self, db_session, tenant):
        orgs = await OrganizationService(db_session).list(actor_for(tenant["owner"]))
        assert orgs[0].id == tenant["root"].id
        assert {o.id for o in orgs} == {tenant["root"].id, tenant["child"].id, tenant["sibling"].id}

    async def test_others_see_only_their_organization(self, db_session, tenant):
        orgs = await OrganizationService(db_session).list(actor_for(tenant["admin"]))
        assert [o.id for o in orgs] == [tenant["child"].id]

    async def test_admin_of_root_does_not_see_children(self, db_session, tenant):
        root_admin = await make_user(db_session, "root-admin@acme.com", Role.ADMIN, tenant["root"])
        orgs = await OrganizationService(db_session).list(actor_for(root_admin))
        assert [o.id for o in orgs] == [tenant["root"].id]

    async def test_no_organization(self, db_session):
        owner = await make_user(db_session, "founder@acme.com", Role.OWNER)
        assert await OrganizationService(db_session).list(actor_for(owner)) == []


@pytest.mark.asyncio
class TestRemoveOrganization:
    async def test_cannot_remove_organization_with_users(self, db_session):
        root = await make_org(db_session, "R")
        owner = await make_user(db_session, "owner@acme.com", Role.OWNER, root)
        await make_user(db_session, "member@acme.com", Role.VIEWER, root)

        with pytest.raises(Conflict, match="has users"):
            await OrganizationService(db_session).remove(root.id, actor_for(owner))

        assert await count(db_session, Organization) == 1
        assert await audit_rows(db_session, "organization:delete") == []

    async def test_owner_removes_own_empty_root(self, db_session):
        root = await make_org(db_session, "R")
        owner = await make_user(db_session, "owner@acme.com", Role.OWNER, root)

        await OrganizationService(db_session).remove(root.id, actor_for(owner))

        assert await count(db_session, Organization) == 0
        assert (await reload_user(db_session, owner.id)).organization_id is None
        rows = await audit_rows(db_session, "organization:delete")
        assert len(rows) == 1
        assert rows[0].resource_id == root.id
        assert rows[0].details == {"name": "R"}

    async def test_owner_removes_empty_child(self, db_session, tenant):
        empty = await make_org(db_session, "Empty", parent=tenant["root"])
        owner = tenant["owner"]

        await OrganizationService(db_session).remove(empty.id, actor_for(owner))

        assert await db_session.get(Organization, empty.id) is None
        assert (await reload_user(db_session, owner.id)).organization_id == tenant["root"].id

    async def test_root_with_children_is_rejected(self, db_session):
        root = await make_org(db_session, "R")
        await make_org(db_session, "C", parent=root)
        owner = await make_user(db_session, "owner@acme.com", Role.OWNER, root)

        with pytest.raises(Conflict, match="sub-organizations"):
            await OrganizationService(db_session).remove(root.id, actor_for(owner))

    async def test_organization_with_tasks_is_rejected(self, db_session, tenant):
        empty = await make_org(db_session, "Busy", parent=tenant["root"])
        await make_task(db_session, "pending", empty, tenant["owner"])

        with pytest.raises(Conflict, match="tasks"):
            await OrganizationService(db_session).remove(empty.id, actor_for(tenant["owner"]))

    async def test_cannot_remove_unrelated_organization(self, db_session, tenant):
        with pytest.raises(Forbidden):
            await OrganizationService(db_session).remove(tenant["other_root"].id, actor_for(tenant["owner"]))

    async def test_owner_of_child_cannot_remove(self, db_session, tenant):
        child_owner = await make_user(db_session, "child-owner@acme.com", Role.OWNER, tenant["sibling"])
        with pytest.raises(Forbidden):
            await OrganizationService(db_session).remove(tenant["child"].id, actor_for(child_owner))

    async def test_admin_cannot_remove(self, db_session, tenant):
        with pytest.raises(Forbidden):
            await OrganizationService(db_session).remove(tenant["child"].id, actor_for(tenant["admin"]))

    async def test_missing_organization(self, db_session, tenant):
        with pytest.raises(NotFound):
            await OrganizationService(db_session).remove("missing", actor_for(tenant["owner"]))
