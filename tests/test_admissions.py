from datetime import datetime, timezone

APPLICATION = {
    "student_name": "ด.ช. มานะ",
    "student_id": "1234567890123",
    "birth_date": "2015-05-01",
    "grade": "ประถมศึกษาปีที่ 4",
    "parent_name": "นายมานพ",
    "parent_phone": "0812345678",
    "parent_email": "parent@school.ac.th",
    "address": "123 หมู่ 4 ตำบลในเมือง",
    "previous_school": "โรงเรียนบ้านนา",
    "gpa": "",
}


def test_submit_application(client, db):
    db.rpc_results["check_submission_rate_limit"] = True

    response = client.post("/api/v1/admissions", json=APPLICATION)

    assert response.status_code == 201
    assert response.json()["id"] == db.rows("admission_applications")[0]["id"]
    assert db.rows("admission_applications")[0]["gpa"] is None
    name, params = db.rpc_calls[0]
    assert name == "check_submission_rate_limit"
    assert params["p_email"] == "parent@school.ac.th"


def test_throttled_submission(client, db):
    db.rpc_results["check_submission_rate_limit"] = False

    response = client.post("/api/v1/admissions", json=APPLICATION)

    assert response.status_code == 429
    assert db.rows("admission_applications") == []


def test_validation(client, db):
    db.rpc_results["check_submission_rate_limit"] = True

    assert client.post("/api/v1/admissions", json={**APPLICATION, "grade": "ปริญญาตรี"}).status_code == 422
    assert client.post("/api/v1/admissions", json={**APPLICATION, "student_id": "123"}).status_code == 422
    assert client.post("/api/v1/admissions", json={**APPLICATION, "parent_email": "nope"}).status_code == 422
    assert db.rpc_calls == []


def test_per_ip_request_limit(client, db):
    db.rpc_results["check_submission_rate_limit"] = True

    statuses = [client.post("/api/v1/admissions", json=APPLICATION).status_code for _ in range(6)]

    assert statuses == [201] * 5 + [429]


def test_admin_listing(client, db, admin_headers, teacher_headers):
    row = {**APPLICATION, "id": "app-1", "gpa": None, "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc).isoformat()}
    db.rpc_results["get_admission_applications_for_admin"] = [row]

    response = client.get("/api/v1/admissions", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()[0]["student_name"] == APPLICATION["student_name"]
    assert client.get("/api/v1/admissions", headers=teacher_headers).status_code == 403
