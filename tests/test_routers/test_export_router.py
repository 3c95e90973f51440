import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from fastapi.testclient import TestClient

from main import app
from core.database import get_db
from auth.services.auth_service import get_current_active_user
from member.models import MemberRole
from shift.models import ShiftStatus
from export.service import ExportFormat


class ExportRouterTests(unittest.TestCase):
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

    @patch("export.router.service.export_shifts", return_value=b"Date,Start Time\n")
    def test_csv_download(self, mock_export):
        resp = self.client.get("/api/export")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertTrue(resp.headers["content-type"].startswith("text/csv"))
        self.assertIn("attachment; filename=\"shiftswap-export-", resp.headers["content-disposition"])
        self.assertIn(".csv", resp.headers["content-disposition"])
        self.assertEqual(resp.content, b"Date,Start Time\n")
        _, kwargs = mock_export.call_args
        self.assertEqual(kwargs["org_id"], 1)
        self.assertEqual(kwargs["fmt"], ExportFormat.csv)

    @patch("export.router.service.export_shifts", return_value=b"[]")
    def test_json_with_filters(self, mock_export):
        resp = self.client.get(
            "/api/export?format=json&status=approved&date_from=2026-11-01&date_to=2026-11-30"
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertTrue(resp.headers["content-type"].startswith("application/json"))
        _, kwargs = mock_export.call_args
        self.assertEqual(kwargs["status"], ShiftStatus.approved)
        self.assertEqual(str(kwargs["date_from"]), "2026-11-01")
        self.assertEqual(str(kwargs["date_to"]), "2026-11-30")

    @patch("export.router.service.export_shifts")
    def test_inverted_date_range_422(self, mock_export):
        resp = self.client.get("/api/export?date_from=2026-12-01&date_to=2026-11-01")
        self.assertEqual(resp.status_code, 422)
        mock_export.assert_not_called()

    def test_unknown_format_422(self):
        self.assertEqual(self.client.get("/api/export?format=xlsx").status_code, 422)

    @patch("export.router.service.export_shifts")
    def test_staff_forbidden(self, mock_export):
        self.user.role = MemberRole.staff
        self.assertEqual(self.client.get("/api/export").status_code, 403)
        mock_export.assert_not_called()


if __name__ == "__main__":
    unittest.main()
