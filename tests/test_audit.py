# tests/test_audit.py: audit entry recording and scoped reads
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core import config
from taskgate.core.errors import Forbidden
from taskgate.features.audit.models import AuditLog
from taskgate.features.audit.service import AuditRecorder
from taskgate.features.permissions.identity import Actor, NoOrganization
from taskgate.features.permissions.rbac import Role
from tests.conftest import actor_for


@pytest.mark.asyncio
class TestAuditLog:
    async def test_log_creates_entry(self, db_session, tenant):
        recorder = AuditRecorder(db_session)

        entry = await recorder.log(
            tenant["owner"].id,
            tenant["root"].id,
            "task:create",
            "task",
            "task-1",
            {"title": "Write report"},
        )

        rows = (await db_session.execute(select(AuditLog))).scalars().all()
        assert [r.id for r in rows] == [entry.id]
        assert entry.action == "task:create"
        assert entry.resource == "task"
        assert entry.resource_id == "task-1"
        assert entry.details == {"title": "Write report"}
        assert entry.timestamp is not None

    async def test_resource_id_defaults_to_empty(self, db_session, tenant):
        entry = await AuditRecorder(db_session).log(tenant["owner"].id, None, "user:logout", "user")
        assert entry.resource_id == ""
        assert entry.details is None


@pytest.mark.asyncio
class TestFindAll:
    async def seed(self, db, tenant):
        recorder = AuditRecorder(db)
        await recorder.log(tenant["owner"].id, tenant["root"].id, "task:create", "task", "t-root")
        await recorder.log(tenant["admin"].id, tenant["child"].id, "task:create", "task", "t-child")
        await recorder.log(tenant["sibling_admin"].id, tenant["sibling"].id, "task:update", "task", "t-sibling")
        await recorder.log(tenant["other_owner"].id, tenant["other_root"].id, "task:create", "task", "t-other")
        await db.commit()
        return recorder

    async def test_root_owner_sees_root_and_children_newest_first(self, db_session, tenant):
        recorder = await self.seed(db_session, tenant)

        entries = await recorder.find_all(actor_for(tenant["owner"]))

        assert [e.resource_id for e in entries] == ["t-sibling", "t-child", "t-root"]

    async def test_child_admin_sees_only_child(self, db_session, tenant):
        recorder = await self.seed(db_session, tenant)

        entries = await recorder.find_all(actor_for(tenant["admin"]))

        assert [e.resource_id for e in entries] == ["t-child"]

    async def test_entries_carry_user_email(self, db_session, tenant):
        recorder = await self.seed(db_session, tenant)
        await recorder.log(None, tenant["child"].id, "system:sweep", "task")

        entries = await recorder.find_all(actor_for(tenant["admin"]))

        assert [e.user_email for e in entries] == [None, "admin@acme.com"]

    async def test_viewer_is_forbidden(self, db_session, tenant):
        recorder = await self.seed(db_session, tenant)
        with pytest.raises(Forbidden):
            await recorder.find_all(actor_for(tenant["viewer"]))

    async def test_page_size_caps_results(self, db_session, tenant, monkeypatch):
        recorder = AuditRecorder(db_session)
        for i in range(5):
            await recorder.log(tenant["owner"].id, tenant["root"].id, "task:update", "task", f"t-{i}")
        monkeypatch.setattr(config, "AUDIT_PAGE_SIZE", 3)

        entries = await recorder.find_all(actor_for(tenant["owner"]))

        assert [e.resource_id for e in entries] == ["t-4", "t-3", "t-2"]

    async def test_no_organization_skips_storage(self):
        db = AsyncMock(spec=AsyncSession)
        actor = Actor(id="u1", email="u1@acme.com", role=Role.OWNER, organization=NoOrganization())

        assert await AuditRecorder(db).find_all(actor) == []
        assert db.mock_calls == []
