"""API tests for /accounts and /documents with the engine, store, and identity overridden."""

import asyncio
import unittest
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from app.api.deps import get_document_source, get_transition_engine
from app.api.v1.auth import get_current_actor, require_admin
from app.main import app
from app.schemas.account import AccountRecord
from app.schemas.auth import CurrentActor
from app.services.account_store import BulkUpdateOutcome
from app.services.transitions import TransitionEngine

PREFIX = "/api/v1"


def _account(account_id: str, **kwargs: object) -> AccountRecord:
    """Build a minimal AccountRecord for tests."""
    defaults: dict[str, object] = {"name": f"Account {account_id}", "email": f"{account_id}@x.com"}
    defaults.update(kwargs)
    return AccountRecord(id=account_id, **defaults)


def _directory() -> list[AccountRecord]:
    return [
        _account("sa", role="super_admin", kyc_status="verified"),
        _account("ad", role="admin", kyc_status="verified"),
        _account("u1", name="John", phone="555-1234"),
        _account("u2", kyc_status="rejected"),
    ]


class AccountsApiTestCase(unittest.TestCase):
    """Base: TestClient with an engine backed by an AsyncMock store, acting as the given admin."""

    actor = CurrentActor(id="ad", email="ad@x.com", role="admin")

    def setUp(self) -> None:
        accounts = _directory()
        self.store = AsyncMock()
        self.store.list_all.return_value = accounts
        self.store.count_by_role.side_effect = lambda role: sum(
            1 for a in accounts if a.role == role
        )
        self.store.bulk_update_kyc.side_effect = lambda ids, status: BulkUpdateOutcome(
            updated=set(ids)
        )
        self.engine = TransitionEngine(self.store)
        asyncio.run(self.engine.refresh())
        self.documents = AsyncMock()
        self.documents.list_documents.return_value = []

        app.dependency_overrides[get_transition_engine] = lambda: self.engine
        app.dependency_overrides[require_admin] = lambda: self.actor
        app.dependency_overrides[get_current_actor] = lambda: self.actor
        app.dependency_overrides[get_document_source] = lambda: self.documents
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()


class TestListAccounts(AccountsApiTestCase):
    """GET /accounts returns the projection with full-set counts."""

    def test_all(self) -> None:
        response = self.client.get(f"{PREFIX}/accounts")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([a["id"] for a in body["visible"]], ["sa", "ad", "u1", "u2"])
        self.assertEqual(
            body["counts"],
            {"all": 4, "pending": 1, "verified": 2, "rejected": 1, "admins": 2},
        )

    def test_filter_and_search(self) -> None:
        response = self.client.get(f"{PREFIX}/accounts", params={"filter": "pending", "search": "jo"})
        body = response.json()
        self.assertEqual([a["id"] for a in body["visible"]], ["u1"])
        self.assertEqual(body["counts"]["all"], 4)

    def test_unknown_filter_rejected(self) -> None:
        response = self.client.get(f"{PREFIX}/accounts", params={"filter": "banned"})
        self.assertEqual(response.status_code, 422)


class TestKycEndpoints(AccountsApiTestCase):
    """Single and bulk KYC updates."""

    def test_set_kyc(self) -> None:
        response = self.client.post(f"{PREFIX}/accounts/u1/kyc", json={"status": "verified"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["kyc_status"], "verified")
        self.assertEqual(response.json()["role"], "user")
        self.store.update_kyc.assert_awaited_once_with("u1", "verified")

    def test_set_kyc_unknown_account(self) -> None:
        response = self.client.post(f"{PREFIX}/accounts/ghost/kyc", json={"status": "verified"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["code"], "not_found")

    def test_bulk_partial(self) -> None:
        self.store.bulk_update_kyc.side_effect = None
        self.store.bulk_update_kyc.return_value = BulkUpdateOutcome(
            updated={"u1"}, failed={"u2"}
        )
        response = self.client.post(
            f"{PREFIX}/accounts/kyc/bulk",
            json={"account_ids": ["u1", "u2", "ghost"], "status": "verified"},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["updated"], ["u1"])
        self.assertEqual(body["updated_count"], 1)
        self.assertEqual(body["failed"], ["ghost", "u2"])
        self.assertTrue(body["partial"])

    def test_bulk_empty_selection(self) -> None:
        response = self.client.post(
            f"{PREFIX}/accounts/kyc/bulk",
            json={"account_ids": [], "status": "verified"},
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"]["code"], "empty_selection")

    def test_bulk_busy_idle(self) -> None:
        response = self.client.get(f"{PREFIX}/accounts/kyc/bulk/busy", params={"status": "verified"})
        self.assertEqual(response.json(), {"account_id": None, "action": "bulk:verified", "busy": False})


class TestRoleAndDelete(AccountsApiTestCase):
    """Role assignment and delete surface structured denials."""

    def test_assign_admin(self) -> None:
        response = self.client.post(f"{PREFIX}/accounts/u1/role", json={"role": "admin"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["role"], "admin")
        self.assertEqual(body["role_assigned_by"], "ad")
        self.assertIsNotNone(body["role_assigned_at"])

    def test_admin_cannot_grant_super_admin(self) -> None:
        response = self.client.post(f"{PREFIX}/accounts/u1/role", json={"role": "super_admin"})
        self.assertEqual(response.status_code, 403)
        detail = response.json()["detail"]
        self.assertEqual(detail["code"], "permission_denied")
        self.assertEqual(detail["reason"], "insufficient_privilege")

    def test_last_super_admin_protected(self) -> None:
        response = self.client.post(f"{PREFIX}/accounts/sa/role", json={"role": "user"})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["detail"]["reason"], "last_super_admin")
        response = self.client.delete(f"{PREFIX}/accounts/sa")
        self.assertEqual(response.json()["detail"]["reason"], "last_super_admin")
        self.assertEqual(self.engine.get("sa").role, "super_admin")

    def test_self_modification(self) -> None:
        response = self.client.post(f"{PREFIX}/accounts/ad/role", json={"role": "user"})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["detail"]["reason"], "self_modification")

    def test_delete_then_not_found(self) -> None:
        response = self.client.delete(f"{PREFIX}/accounts/u2")
        self.assertEqual(response.status_code, 204)
        response = self.client.delete(f"{PREFIX}/accounts/u2")
        self.assertEqual(response.status_code, 404)

    def test_busy_flag(self) -> None:
        response = self.client.get(f"{PREFIX}/accounts/u1/busy", params={"action": "delete"})
        self.assertEqual(response.json()["busy"], False)


class TestCountsAndExport(AccountsApiTestCase):
    """Admin counts and CSV export."""

    def test_admin_counts(self) -> None:
        response = self.client.get(f"{PREFIX}/accounts/admin-counts")
        self.assertEqual(response.json(), {"admins": 1, "super_admins": 1})

    def test_export(self) -> None:
        response = self.client.get(f"{PREFIX}/accounts/export")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/csv"))
        self.assertIn("attachment", response.headers["content-disposition"])
        lines = response.text.strip().split("\n")
        self.assertEqual(len(lines), 5)
        self.assertTrue(lines[0].startswith("User ID,Name,Email"))


class TestDocumentsEndpoint(AccountsApiTestCase):
    """GET /documents/{id} is owner-only and distinguishes unavailable from empty."""

    def test_non_owner_not_available(self) -> None:
        response = self.client.get(f"{PREFIX}/documents/u1")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body["available"])
        self.assertEqual(body["reason"], "owner_only")
        self.documents.list_documents.assert_not_awaited()

    def test_owner_empty_listing(self) -> None:
        response = self.client.get(f"{PREFIX}/documents/ad")
        body = response.json()
        self.assertTrue(body["available"])
        self.assertEqual(body["documents"], [])


class TestRequireAdmin(unittest.TestCase):
    """Non-admin identities are rejected before reaching the engine."""

    def test_user_forbidden(self) -> None:
        app.dependency_overrides[get_transition_engine] = lambda: TransitionEngine(AsyncMock())
        app.dependency_overrides[get_current_actor] = lambda: CurrentActor(
            id="u1", email="u1@x.com", role="user"
        )
        try:
            response = TestClient(app).get(f"{PREFIX}/accounts/admin-counts")
        finally:
            app.dependency_overrides.clear()
        self.assertEqual(response.status_code, 403)


if __name__ == "__main__":
    unittest.main()
