from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from school_portal.config.access_config import Role, approval_status, ApprovalStatus, parse_role
from school_portal.core.dependencies import get_auth_context
from school_portal.modules.access.service import AccessService, AuthContext, LOOKUP_FAILED_DETAIL


def test_unapproved_role_counts_as_no_role(db):
    db.add_account("u-1", role="teacher", approved=False)

    assert AccessService(db).get_role("u-1") is None


def test_approved_role_is_returned(db):
    db.add_account("u-1", role="guardian")

    assert AccessService(db).get_role("u-1") == Role.GUARDIAN


def test_admin_wins_over_other_approved_roles(db):
    db.add_account("u-1", role="teacher")
    db.new_row("user_roles", {"user_id": "u-1", "role": "admin", "approved": True, "pending_approval": False})

    assert AccessService(db).get_role("u-1") == Role.ADMIN


def test_earliest_approved_role_wins_without_admin(db):
    db.add_account("u-1", role="student")
    db.new_row("user_roles", {"user_id": "u-1", "role": "teacher", "approved": True, "pending_approval": False})

    assert AccessService(db).get_role("u-1") == Role.STUDENT


def test_unknown_role_value_is_rejected(db):
    db.add_account("u-1", role="janitor")

    with pytest.raises(ValueError):
        AccessService(db).get_role("u-1")


def test_permissions_only_include_granted_known_names(db):
    db.add_account("u-1", role="teacher", permissions=["create_news", "menu_library"])
    db.new_row("user_permissions", {"user_id": "u-1", "permission_name": "edit_news", "granted": False})
    db.new_row("user_permissions", {"user_id": "u-1", "permission_name": "launch_rockets", "granted": True})

    assert AccessService(db).get_permissions("u-1") == frozenset({"create_news", "menu_library"})


def test_build_context_wraps_lookup_failure(db):
    db.fail("user_roles", "select")

    with pytest.raises(HTTPException) as exc:
        AccessService(db).build_context({"id": "u-1", "email": "u@school.ac.th"})

    assert exc.value.status_code == 500
    assert exc.value.detail == LOOKUP_FAILED_DETAIL


def test_auth_context_permission_checks():
    teacher = AuthContext(user_id="t", role=Role.TEACHER, permissions=frozenset({"create_news"}))
    admin = AuthContext(user_id="a", role=Role.ADMIN)

    assert teacher.can("create_news")
    assert not teacher.can("delete_news")
    assert not teacher.is_admin
    assert admin.can("delete_news")


def test_auth_context_is_resolved_once_per_request():
    calls = []

    class CountingAccessService:
        def build_context(self, user_data):
            calls.append(user_data["id"])
            return AuthContext(user_id=user_data["id"])

    request = SimpleNamespace(state=SimpleNamespace())
    service = CountingAccessService()

    first = get_auth_context(request, {"id": "u-1"}, service)
    second = get_auth_context(request, {"id": "u-1"}, service)

    assert first is second
    assert calls == ["u-1"]


def test_parse_role_and_approval_status():
    assert parse_role("teacher") == Role.TEACHER
    with pytest.raises(ValueError):
        parse_role(None)
    assert approval_status(True, True) == ApprovalStatus.APPROVED
    assert approval_status(False, True) == ApprovalStatus.PENDING


def test_me_route_without_approval_has_no_role(client, db):
    headers = db.add_account("u-1", role="student", approved=False, permissions=["menu_library"])

    response = client.get("/api/v1/access/me", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["role"] is None
    assert body["permissions"] == ["menu_library"]


def test_me_route_rejects_missing_and_invalid_tokens(client):
    assert client.get("/api/v1/access/me").status_code in (401, 403)
    response = client.get("/api/v1/access/me", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_me_route_reports_lookup_failure(client, db):
    headers = db.add_account("u-1", role="janitor")

    response = client.get("/api/v1/access/me", headers=headers)

    assert response.status_code == 500
    assert response.json()["detail"] == LOOKUP_FAILED_DETAIL
