# tests/test_services/test_swaplog_service.py
import unittest
from datetime import date, time

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.database import Base
import models_bootstrap

from organization.models import Organization
from member.models import Member, MemberRole
from shift.schemas import ShiftPost
from shift import lifecycle
from swaplog.models import SwapAction
from swaplog import service


class SwapLogServiceTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        TestingSession = sessionmaker(bind=self.engine, future=True)
        self.db = TestingSession()

        org = Organization(name="Cafe", join_code="ABCD2345")
        other = Organization(name="Diner", join_code="QRST2345")
        self.db.add_all([org, other])
        self.db.flush()
        self.org_id, self.other_org_id = org.id, other.id

        self.manager = Member(org_id=org.id, name="Maria", email="maria@example.com",
                              password_hash="x", role=MemberRole.manager)
        self.anna = Member(org_id=org.id, name="Anna", email="anna@example.com",
                           password_hash="x", role=MemberRole.staff)
        self.bob = Member(org_id=org.id, name="Bob", email="bob@example.com",
                          password_hash="x", role=MemberRole.staff)
        self.dave = Member(org_id=other.id, name="Dave", email="dave@example.com",
                           password_hash="x", role=MemberRole.staff)
        self.db.add_all([self.manager, self.anna, self.bob, self.dave])
        self.db.commit()

        self.shift_id = self._post(self.anna).id
        lifecycle.claim_shift(self.db, self.shift_id, 0, self.bob)
        lifecycle.approve_shift(self.db, self.shift_id, 1, self.manager)
        self._post(self.dave)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _post(self, owner):
        return lifecycle.post_shift(self.db, ShiftPost(
            org_id=owner.org_id,
            title="Close",
            date=date(2026, 11, 5),
            start_time=time(18, 0),
            end_time=time(23, 30),
            original_owner_id=owner.id,
        ), owner)

    def test_history_is_newest_first_and_org_scoped(self):
        rows = service.get_history(self.db, org_id=self.org_id)
        self.assertEqual(
            [r.action for r in rows],
            [SwapAction.approved, SwapAction.claimed, SwapAction.posted],
        )
        self.assertEqual(rows[0].actor.name, "Maria")
        self.assertEqual(rows[0].shift.original_owner.name, "Anna")

        foreign = service.get_history(self.db, org_id=self.other_org_id)
        self.assertEqual([r.action for r in foreign], [SwapAction.posted])

    def test_history_limit(self):
        rows = service.get_history(self.db, org_id=self.org_id, limit=1)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].action, SwapAction.approved)

    def test_logs_for_shift_oldest_first_with_details(self):
        logs = service.get_logs_for_shift(self.db, self.shift_id)
        self.assertEqual([l.action for l in logs], [SwapAction.posted, SwapAction.claimed, SwapAction.approved])
        self.assertEqual(logs[1].details["claimed_by"], "Bob")
        self.assertEqual(logs[2].details["approved_by"], "Maria")
        self.assertEqual(service.count_logs_for_shift(self.db, self.shift_id), 3)

    def test_append_log_does_not_commit(self):
        service.append_log(self.db, shift_id=self.shift_id, actor_id=self.manager.id, action=SwapAction.cancelled)
        self.assertEqual(service.count_logs_for_shift(self.db, self.shift_id), 4)
        self.db.rollback()
        self.assertEqual(service.count_logs_for_shift(self.db, self.shift_id), 3)


if __name__ == "__main__":
    unittest.main()
