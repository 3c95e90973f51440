import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from datetime import date, time, datetime, timezone
from fastapi.testclient import TestClient

from main import app
from core.database import get_db
from auth.services.auth_service import get_current_active_user
from notification.service import get_notifier
from member.models import MemberRole
from shift.models import ShiftStatus
from shift.schemas import TransitionAction
from shift.errors import (
    AlreadyClaimed, Forbidden, InvalidTransition, NotFound, SelfClaimForbidden, TransientStoreError,
    VersionConflict,
)


def _shift(**overrides):
    data = dict(
        id=1,
        org_id=1,
        title="Morning bar",
        date=date(2026, 11, 2),
        start_time=time(9, 0),
        end_time=time(17, 0),
        reason=None,
        status=ShiftStatus.posted,
        version=0,
        original_owner_id=5,
        posted_by_id=5,
        claimed_by_id=None,
        required_role_id=None,
        created_at=datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc),
        claimed_at=None,
        approved_at=None,
        declined_at=None,
        cancelled_at=None,
        original_owner=Obj(id=5, name="Anna", staff_title="Barista"),
        claimed_by=None,
        posted_by=Obj(id=5, name="Anna", staff_title="Barista"),
    )
    data.update(overrides)
    return Obj(**data)


class ShiftRouterTests(unittest.TestCase):
    def setUp(self):
        # Minimal fake DB (router doesn't hit DB directly in these tests)
        class FakeDB:
            def rollback(self): ...
        def _fake_db():
            yield FakeDB()

        self.notifier = object()
        self.user = Obj(org_id=1, id=123, role=MemberRole.staff, name="Bob")
        app.dependency_overrides[get_db] = _fake_db
        app.dependency_overrides[get_current_active_user] = lambda: self.user
        app.dependency_overrides[get_notifier] = lambda: self.notifier

        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_current_active_user, None)
        app.dependency_overrides.pop(get_notifier, None)

    # ---------- LIST ----------
    @patch("shift.router.service.count_shifts")
    @patch("shift.router.service.get_shifts")
    def test_list_forces_org_and_viewer(self, mock_get_shifts, mock_count):
        mock_get_shifts.return_value = [_shift()]
        mock_count.return_value = 1

        resp = self.client.get("/api/shifts")
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        self.assertEqual(data["total"], 1)
        self.assertEqual(data["page"], 1)
        self.assertEqual(data["page_size"], 50)
        self.assertEqual(data["shifts"][0]["original_owner"]["name"], "Anna")
        self.assertEqual(data["shifts"][0]["version"], 0)

        _, kwargs = mock_get_shifts.call_args
        self.assertEqual(kwargs["org_id"], 1)
        self.assertEqual(kwargs["viewer_id"], 123)
        self.assertEqual(kwargs["viewer_role"], MemberRole.staff)

    @patch("shift.router.service.count_shifts", return_value=0)
    @patch("shift.router.service.get_shifts", return_value=[])
    def test_list_filters_and_pages(self, mock_get_shifts, _count):
        resp = self.client.get("/api/shifts?status=claimed&page=2&page_size=10")
        self.assertEqual(resp.status_code, 200, resp.text)
        _, kwargs = mock_get_shifts.call_args
        self.assertEqual(kwargs["status"], ShiftStatus.claimed)
        self.assertEqual(kwargs["page"], 2)
        self.assertEqual(kwargs["page_size"], 10)

    def test_list_rejects_bad_paging(self):
        self.assertEqual(self.client.get("/api/shifts?page=0").status_code, 422)
        self.assertEqual(self.client.get("/api/shifts?page_size=1000").status_code, 422)
        self.assertEqual(self.client.get("/api/shifts?status=lost").status_code, 422)

    # ---------- GET ONE ----------
    @patch("shift.router.service.get_shift_for_org")
    def test_get_one_scoped_to_org(self, mock_get):
        mock_get.return_value = _shift(id=7)
        resp = self.client.get("/api/shifts/7")
        self.assertEqual(resp.status_code, 200, resp.text)
        args, _ = mock_get.call_args
        self.assertEqual(args[1:], (7, 1))

    @patch("shift.router.service.get_shift_for_org", return_value=None)
    def test_get_one_404(self, _mock):
        resp = self.client.get("/api/shifts/999")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Shift not found")

    # ---------- POST ----------
    @patch("shift.router.lifecycle.post_shift")
    def test_post_builds_internal_dto_with_org(self, mock_post):
        mock_post.return_value = _shift(id=2)
        payload = {
            "title": "  Morning bar ",
            "date": "2026-11-02",
            "start_time": "09:00",
            "end_time": "17:00",
            "original_owner_id": 123,
        }
        resp = self.client.post("/api/shifts", json=payload)
        self.assertEqual(resp.status_code, 201, resp.text)
        args, kwargs = mock_post.call_args
        dto = args[1]
        self.assertEqual(dto.org_id, 1)
        self.assertEqual(dto.title, "Morning bar")
        self.assertIs(args[2], self.user)
        self.assertIs(kwargs["notifier"], self.notifier)

    def test_post_rejects_org_id_in_payload(self):
        payload = {
            "org_id": 99,
            "title": "x",
            "date": "2026-11-02",
            "start_time": "09:00",
            "end_time": "17:00",
            "original_owner_id": 123,
        }
        self.assertEqual(self.client.post("/api/shifts", json=payload).status_code, 422)

    def test_post_rejects_zero_length_shift(self):
        payload = {
            "title": "x",
            "date": "2026-11-02",
            "start_time": "09:00",
            "end_time": "09:00",
            "original_owner_id": 123,
        }
        self.assertEqual(self.client.post("/api/shifts", json=payload).status_code, 422)

    @patch("shift.router.lifecycle.post_shift", side_effect=Forbidden("You can only post your own shifts"))
    def test_post_forbidden_maps_to_403(self, _mock):
        payload = {
            "title": "x",
            "date": "2026-11-02",
            "start_time": "09:00",
            "end_time": "17:00",
            "original_owner_id": 5,
        }
        resp = self.client.post("/api/shifts", json=payload)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"]["code"], "forbidden")

    # ---------- PATCH ----------
    @patch("shift.router.lifecycle.apply_transition")
    def test_patch_passes_action_and_version(self, mock_apply):
        mock_apply.return_value = _shift(status=ShiftStatus.claimed, version=1, claimed_by_id=123,
                                         claimed_by=Obj(id=123, name="Bob", staff_title=None))
        resp = self.client.patch("/api/shifts/1", json={"action": "claim", "version": 0})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["status"], "claimed")
        self.assertEqual(resp.json()["claimed_by"]["name"], "Bob")
        args, kwargs = mock_apply.call_args
        self.assertEqual(args[1:], (1, TransitionAction.claim, 0, self.user))
        self.assertIs(kwargs["notifier"], self.notifier)

    def test_patch_validates_body(self):
        self.assertEqual(self.client.patch("/api/shifts/1", json={"action": "claim"}).status_code, 422)
        self.assertEqual(self.client.patch("/api/shifts/1", json={"action": "steal", "version": 0}).status_code, 422)
        self.assertEqual(self.client.patch("/api/shifts/1", json={"action": "claim", "version": -1}).status_code, 422)
        self.assertEqual(
            self.client.patch("/api/shifts/1", json={"action": "claim", "version": 0, "status": "approved"}).status_code,
            422,
        )

    def test_patch_maps_lifecycle_errors(self):
        cases = [
            (NotFound(shift_id=1), 404, "not_found"),
            (VersionConflict(shift_id=1, expected_version=0, current_version=2), 409, "version_conflict"),
            (AlreadyClaimed(shift_id=1, expected_version=0, current_version=1), 409, "already_claimed"),
            (InvalidTransition(shift_id=1), 409, "invalid_transition"),
            (SelfClaimForbidden(shift_id=1), 400, "self_claim_forbidden"),
            (Forbidden("Only managers can approve shifts"), 403, "forbidden"),
            (TransientStoreError(), 503, "transient_store_error"),
        ]
        for exc, status_code, code in cases:
            with self.subTest(code=code):
                with patch("shift.router.lifecycle.apply_transition", side_effect=exc):
                    resp = self.client.patch("/api/shifts/1", json={"action": "claim", "version": 0})
                self.assertEqual(resp.status_code, status_code, resp.text)
                self.assertEqual(resp.json()["detail"]["code"], code)

    @patch("shift.router.lifecycle.apply_transition")
    def test_conflict_reports_current_version(self, mock_apply):
        mock_apply.side_effect = VersionConflict(shift_id=1, expected_version=0, current_version=3)
        resp = self.client.patch("/api/shifts/1", json={"action": "cancel", "version": 0})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["detail"]["current_version"], 3)

    def test_requires_authentication(self):
        app.dependency_overrides.pop(get_current_active_user, None)
        resp = self.client.get("/api/shifts")
        self.assertEqual(resp.status_code, 401)


if __name__ == "__main__":
    unittest.main()
