import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from datetime import date, time, datetime, timezone
from fastapi.testclient import TestClient

from main import app
from core.database import get_db
from auth.services.auth_service import get_current_active_user
from member.models import MemberRole
from swaplog.models import SwapAction


class HistoryRouterTests(unittest.TestCase):
    def setUp(self):
        class FakeDB:
            def rollback(self): pass
        def _fake_db():
            yield FakeDB()

        self.user = Obj(org_id=1, id=10, role=MemberRole.manager)
        app.dependency_overrides[get_db] = _fake_db
        app.dependency_overrides[get_current_active_user] = lambda: self.user
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_current_active_user, None)

    @patch("swaplog.router.service.get_history")
    def test_history_for_manager(self, mock_history):
        mock_history.return_value = [
            Obj(
                id=3,
                shift_id=1,
                actor_id=10,
                action=SwapAction.approved,
                details={"approved_by": "Maria", "claimed_by_id": 12},
                created_at=datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc),
                actor=Obj(id=10, name="Maria", role=MemberRole.manager),
                shift=Obj(id=1, title="Morning bar", date=date(2026, 11, 2), start_time=time(9, 0),
                          end_time=time(17, 0), original_owner=Obj(id=11, name="Anna")),
            )
        ]
        resp = self.client.get("/api/history?limit=5")
        self.assertEqual(resp.status_code, 200, resp.text)
        row = resp.json()[0]
        self.assertEqual(row["action"], "approved")
        self.assertEqual(row["actor"], {"id": 10, "name": "Maria", "role": "manager"})
        self.assertEqual(row["shift"]["original_owner"]["name"], "Anna")
        _, kwargs = mock_history.call_args
        self.assertEqual(kwargs, {"org_id": 1, "limit": 5})

    @patch("swaplog.router.service.get_history")
    def test_history_forbidden_for_staff(self, mock_history):
        self.user.role = MemberRole.staff
        self.assertEqual(self.client.get("/api/history").status_code, 403)
        mock_history.assert_not_called()

    def test_history_limit_bounds(self):
        self.assertEqual(self.client.get("/api/history?limit=0").status_code, 422)
        self.assertEqual(self.client.get("/api/history?limit=501").status_code, 422)


if __name__ == "__main__":
    unittest.main()
