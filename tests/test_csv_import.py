import pytest
from fastapi import HTTPException

from school_portal.modules.admin.csv_import import (
    EMAIL, INCOMPLETE_ROW, INSERT_FAILED, INVALID_EMAIL, INVALID_STATUS, NAME, PASSWORD, STATUS,
    CsvRoleImporter, match_headers, split_csv_line
)

HEADER = "ชื่อ,อีเมล,รหัสผ่าน,สถานะ"

MIXED_FILE = "\n".join([
    HEADER,
    "สมชาย ใจดี,somchai@school.ac.th,1234,ครู",
    "สมหญิง,not-an-email,1234,นักเรียน",
    "ดวงใจ,duangjai@school.ac.th,1234,แม่บ้าน",
    "มานี,manee@school.ac.th",
    "ปิติ,piti@school.ac.th,1234,ผู้ปกครอง",
])


def test_split_respects_quotes_and_trims():
    assert split_csv_line('"ใจดี, สมชาย" , a@b.c ,x,ครู') == ["ใจดี, สมชาย", "a@b.c", "x", "ครู"]
    assert split_csv_line("a,,b") == ["a", "", "b"]


def test_headers_match_loosely_in_any_order():
    columns, missing = match_headers(["สถานะ", " อีเมล ", "ชื่อ-นามสกุล", "รหัสผ่าน"])

    assert missing == []
    assert columns == {NAME: 2, EMAIL: 1, PASSWORD: 3, STATUS: 0}


def test_missing_header_is_reported():
    columns, missing = match_headers(["ชื่อ", "อีเมล", "สถานะ"])

    assert missing == [PASSWORD]


def test_mixed_file_imports_valid_rows_and_reports_the_rest(db):
    result = CsvRoleImporter(db).run(MIXED_FILE)

    assert result.success_count == 2
    assert [(error.row, error.message) for error in result.errors] == [
        (2, INVALID_EMAIL),
        (3, INVALID_STATUS),
        (4, INCOMPLETE_ROW),
    ]
    rows = db.rows("user_roles")
    assert [(row["email"], row["role"]) for row in rows] == [
        ("somchai@school.ac.th", "teacher"),
        ("piti@school.ac.th", "guardian"),
    ]
    assert all(row["approved"] is False and row["pending_approval"] is True for row in rows)
    assert len({row["user_id"] for row in rows}) == 2


def test_one_good_row_one_bad_email(db):
    text = "\n".join([
        HEADER,
        "สมชาย,somchai@example.com,secret123,ครู",
        "สมหญิง,bad-email,secret123,นักเรียน",
    ])

    result = CsvRoleImporter(db).run(text)

    assert result.success_count == 1
    assert [(error.row, error.message) for error in result.errors] == [(2, INVALID_EMAIL)]
    [row] = db.rows("user_roles")
    assert row["role"] == "teacher"
    assert row["approved"] is False
    assert row["pending_approval"] is True


def test_admin_is_never_an_importable_status(db):
    text = "\n".join([HEADER, "ผู้ดูแล,boss@school.ac.th,1234,ผู้ดูแลระบบ", "x,x@school.ac.th,1,admin"])

    result = CsvRoleImporter(db).run(text)

    assert result.success_count == 0
    assert {error.message for error in result.errors} == {INVALID_STATUS}
    assert db.rows("user_roles") == []


def test_failed_insert_does_not_stop_other_rows(db):
    db.fail("user_roles", "insert", email="somchai@school.ac.th")

    result = CsvRoleImporter(db).run(MIXED_FILE)

    assert result.success_count == 1
    assert (1, INSERT_FAILED) in [(error.row, error.message) for error in result.errors]
    assert [error.row for error in result.errors] == sorted(error.row for error in result.errors)
    assert [row["email"] for row in db.rows("user_roles")] == ["piti@school.ac.th"]


def test_blank_lines_are_skipped(db):
    text = HEADER + "\n\nสมชาย,somchai@school.ac.th,1234,ครู\n   \n"

    result = CsvRoleImporter(db).run(text)

    assert result.success_count == 1
    assert result.errors == []


@pytest.mark.parametrize("text", ["", "\n\n", "ชื่อ,อีเมล\nสมชาย,somchai@school.ac.th"])
def test_empty_file_or_bad_header_is_rejected(db, text):
    with pytest.raises(HTTPException) as exc:
        CsvRoleImporter(db).run(text)

    assert exc.value.status_code == 400
    assert db.writes("user_roles") == []


def test_import_route(client, db, admin_headers):
    response = client.post(
        "/api/v1/admin/roles/import",
        headers=admin_headers,
        files={"file": ("roles.csv", MIXED_FILE.encode("utf-8-sig"), "text/csv")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success_count"] == 2
    assert len(body["errors"]) == 3


def test_import_route_rejects_other_files(client, admin_headers):
    response = client.post(
        "/api/v1/admin/roles/import",
        headers=admin_headers,
        files={"file": ("roles.xlsx", b"binary", "application/octet-stream")},
    )

    assert response.status_code == 400


def test_import_route_requires_admin(client, teacher_headers):
    response = client.post(
        "/api/v1/admin/roles/import",
        headers=teacher_headers,
        files={"file": ("roles.csv", MIXED_FILE.encode("utf-8"), "text/csv")},
    )

    assert response.status_code == 403
