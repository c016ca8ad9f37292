import pytest

BASE = "/v1/marksheets"


@pytest.fixture
def setup(factory):
    factory.scheme("Grade A", 80, 100)
    factory.scheme("Grade B", 60, 79)
    factory.scheme("Grade F", 0, 39)
    math, english = factory.subject("Mathematics"), factory.subject("English")
    enrollment = factory.enrollment(factory.student())
    return {"math": math, "english": english, "enrollment": enrollment}


def _enter(client, setup, marks, **extra):
    body = {"academicYearEnrollmentId": setup["enrollment"].id, "marks": marks, **extra}
    return client.post(f"{BASE}/", json=body)


def test_enter_marks_computes_percentage_and_grade(client, setup):
    res = _enter(client, setup, [
        {"subjectId": setup["math"].id, "marksObtained": 45, "maxMarks": 50},
        {"subjectId": setup["english"].id, "marksObtained": 25, "maxMarks": 50},
    ])
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["status"] == "Draft"
    assert data["academicYearId"] == setup["enrollment"].academic_year_id
    marks = {m["subjectId"]: m for m in data["marks"]}
    assert marks[setup["math"].id]["percentage"] == 90.0
    assert marks[setup["math"].id]["grade"] == "A"
    # 50% 는 어느 구간에도 없음 → 등급 미판정
    assert marks[setup["english"].id]["grade"] is None


def test_enter_marks_upserts_by_subject(client, setup):
    created = _enter(client, setup, [{"subjectId": setup["math"].id, "marksObtained": 30, "maxMarks": 100}])
    sheet_id = created.json()["data"]["id"]

    res = client.post(f"{BASE}/", json={
        "marksheetId": sheet_id,
        "marks": [{"subjectId": setup["math"].id, "marksObtained": 70, "maxMarks": 100}],
    })
    assert res.status_code == 201
    marks = res.json()["data"]["marks"]
    assert len(marks) == 1
    assert marks[0]["grade"] == "B"


def test_marks_cannot_exceed_max(client, setup):
    res = _enter(client, setup, [{"subjectId": setup["math"].id, "marksObtained": 120, "maxMarks": 100}])
    assert res.status_code == 400


def test_enrollment_required_for_new_marksheet(client):
    res = client.post(f"{BASE}/", json={"marks": []})
    assert res.status_code == 400


def test_unknown_enrollment(client):
    res = client.post(f"{BASE}/", json={"academicYearEnrollmentId": 999, "marks": []})
    assert res.status_code == 404


def test_workflow_submit_approve(client, setup, admin_headers):
    sheet_id = _enter(client, setup, [{"subjectId": setup["math"].id, "marksObtained": 90, "maxMarks": 100}]).json()["data"]["id"]

    res = client.post(f"{BASE}/{sheet_id}/submit")
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "submitted"

    assert client.post(f"{BASE}/{sheet_id}/approve").status_code == 401

    res = client.post(f"{BASE}/{sheet_id}/approve", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "approved"
    assert res.json()["data"]["modifiedBy"] == "admin"

    # 승인 후에는 수정/삭제/재승인 불가
    res = client.post(f"{BASE}/", json={
        "marksheetId": sheet_id,
        "marks": [{"subjectId": setup["math"].id, "marksObtained": 10, "maxMarks": 100}],
    })
    assert res.status_code == 409
    assert client.delete(f"{BASE}/{sheet_id}").status_code == 409
    assert client.post(f"{BASE}/{sheet_id}/approve", headers=admin_headers).status_code == 409


def test_submit_empty_marksheet(client, setup):
    sheet_id = _enter(client, setup, []).json()["data"]["id"]
    assert client.post(f"{BASE}/{sheet_id}/submit").status_code == 400


def test_reject_requires_reason_and_allows_resubmit(client, setup, admin_headers):
    sheet_id = _enter(client, setup, [{"subjectId": setup["math"].id, "marksObtained": 90, "maxMarks": 100}]).json()["data"]["id"]
    client.post(f"{BASE}/{sheet_id}/submit")

    res = client.post(f"{BASE}/{sheet_id}/reject", json={"reason": "  "}, headers=admin_headers)
    assert res.status_code == 400

    res = client.post(f"{BASE}/{sheet_id}/reject", json={"reason": "점수 재확인 필요"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "rejected"
    assert res.json()["data"]["remarks"] == "점수 재확인 필요"

    assert client.post(f"{BASE}/{sheet_id}/submit").json()["data"]["status"] == "submitted"


def test_approve_draft_is_conflict(client, setup, admin_headers):
    sheet_id = _enter(client, setup, [{"subjectId": setup["math"].id, "marksObtained": 90, "maxMarks": 100}]).json()["data"]["id"]
    res = client.post(f"{BASE}/{sheet_id}/approve", headers=admin_headers)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CONFLICT"


def test_delete_draft(client, setup):
    sheet_id = _enter(client, setup, [{"subjectId": setup["math"].id, "marksObtained": 90, "maxMarks": 100}]).json()["data"]["id"]
    assert client.delete(f"{BASE}/{sheet_id}").status_code == 200
    assert client.get(f"{BASE}/{sheet_id}").status_code == 404


def test_approved_marks_feed_analytics(client, setup, admin_headers):
    sheet_id = _enter(client, setup, [{"subjectId": setup["math"].id, "marksObtained": 80, "maxMarks": 100}]).json()["data"]["id"]

    overview = client.get("/v1/analytics/student-performance").json()["data"]["overview"]
    assert overview["totalSubjects"] == 0

    client.post(f"{BASE}/{sheet_id}/submit")
    client.post(f"{BASE}/{sheet_id}/approve", headers=admin_headers)

    overview = client.get("/v1/analytics/student-performance").json()["data"]["overview"]
    assert overview["totalSubjects"] == 1
    assert overview["averagePercentage"] == 80.0


# ==========================================================
# 목록 조회 / 승인 대기
# ==========================================================

def test_list_pending_marksheets(client, setup, factory, admin_headers):
    other = factory.enrollment(factory.student())
    draft_id = _enter(client, setup, [{"subjectId": setup["math"].id, "marksObtained": 90, "maxMarks": 100}]).json()["data"]["id"]
    res = client.post(f"{BASE}/", json={
        "academicYearEnrollmentId": other.id,
        "marks": [{"subjectId": setup["math"].id, "marksObtained": 70, "maxMarks": 100}],
    })
    pending_id = res.json()["data"]["id"]
    client.post(f"{BASE}/{pending_id}/submit")

    res = client.get(f"{BASE}/", params={"status": "submitted"})
    assert res.status_code == 200
    data = res.json()["data"]
    assert [m["id"] for m in data["marksheets"]] == [pending_id]
    assert data["marksheets"][0]["marks"][0]["grade"] == "B"
    assert data["pagination"] == {"total": 1, "page": 1, "limit": 50, "totalPages": 1}

    # 목록에서 찾은 성적표를 바로 승인
    assert client.post(f"{BASE}/{pending_id}/approve", headers=admin_headers).status_code == 200
    assert client.get(f"{BASE}/", params={"status": "submitted"}).json()["data"]["marksheets"] == []

    drafts = client.get(f"{BASE}/", params={"status": "Draft"}).json()["data"]["marksheets"]
    assert [m["id"] for m in drafts] == [draft_id]


def test_list_filters_by_enrollment(client, setup, factory):
    other = factory.enrollment(factory.student())
    mine = _enter(client, setup, []).json()["data"]["id"]
    client.post(f"{BASE}/", json={"academicYearEnrollmentId": other.id, "marks": []})

    res = client.get(f"{BASE}/", params={"enrollmentId": setup["enrollment"].id})
    assert [m["id"] for m in res.json()["data"]["marksheets"]] == [mine]

    res = client.get(f"{BASE}/", params={"schoolId": 2})
    assert res.json()["data"]["pagination"]["total"] == 0
    assert res.json()["data"]["pagination"]["totalPages"] == 0


def test_list_pagination_newest_first(client, setup, factory):
    ids = []
    for _ in range(3):
        enrollment = factory.enrollment(factory.student())
        res = client.post(f"{BASE}/", json={"academicYearEnrollmentId": enrollment.id, "marks": []})
        ids.append(res.json()["data"]["id"])

    first = client.get(f"{BASE}/", params={"limit": 2}).json()["data"]
    second = client.get(f"{BASE}/", params={"limit": 2, "page": 2}).json()["data"]
    assert [m["id"] for m in first["marksheets"]] == [ids[2], ids[1]]
    assert [m["id"] for m in second["marksheets"]] == [ids[0]]
    assert first["pagination"]["totalPages"] == 2


def test_list_rejects_unknown_status(client):
    res = client.get(f"{BASE}/", params={"status": "pending"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_rejects_bad_page(client):
    assert client.get(f"{BASE}/", params={"page": 0}).status_code == 422
