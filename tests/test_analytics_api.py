from datetime import date, datetime

BASE = "/v1/analytics"


def test_student_performance_envelope_and_camel_case(client, factory):
    student = factory.student()
    factory.attendance(student, date(2025, 3, 3), "present")
    factory.report_card(student, 88, "A")

    res = client.get(f"{BASE}/student-performance")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Student performance analytics retrieved successfully"

    data = body["data"]
    assert set(data) == {"overview", "attendance", "gradeDistribution", "topPerformers", "subjectPerformance"}
    assert data["overview"]["totalStudents"] == 1
    assert data["attendance"]["attendanceRate"] == 100.0
    assert data["gradeDistribution"] == [{"grade": "A", "count": 1}]
    assert data["topPerformers"][0]["studentName"] == student.student_name


def test_student_performance_is_public(client):
    assert client.get(f"{BASE}/student-performance").status_code == 200


def test_query_filters_are_applied(client, factory):
    s1, s2 = factory.student(), factory.student(school_id=2)
    factory.attendance(s1, date(2025, 3, 3), "absent")
    factory.attendance(s2, date(2025, 3, 3), "present")

    data = client.get(f"{BASE}/student-performance", params={"schoolId": 1}).json()["data"]
    assert data["overview"]["totalStudents"] == 1
    assert data["attendance"]["absent"] == 1

    data = client.get(f"{BASE}/student-performance", params={"studentId": s2.id}).json()["data"]
    assert data["attendance"]["present"] == 1


def test_inverted_date_range_is_rejected(client):
    res = client.get(f"{BASE}/student-performance", params={"startDate": "2025-04-01", "endDate": "2025-03-01"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


def test_malformed_query_param(client):
    res = client.get(f"{BASE}/student-performance", params={"schoolId": "abc"})
    assert res.status_code == 422
    assert res.json()["success"] is False


def test_school_dashboard_requires_admin(client):
    res = client.get(f"{BASE}/school-dashboard")
    assert res.status_code == 401


def test_school_dashboard_pins_now_to_end_date(client, factory, admin_headers):
    s1, s2 = factory.student(), factory.student()
    factory.attendance(s1, date(2025, 6, 15), "present")
    factory.attendance(s2, date(2025, 6, 15), "late")
    factory.sponsor()
    factory.report_card(s1, 90, "A+", created_at=datetime(2025, 6, 1, 8, 0))

    res = client.get(f"{BASE}/school-dashboard", params={"endDate": "2025-06-15"}, headers=admin_headers)
    assert res.status_code == 200
    data = res.json()["data"]
    assert set(data) == {
        "overview", "attendanceToday", "gradeDistribution",
        "performanceTrend", "attendanceTrend", "topSubjects",
    }
    assert data["overview"]["activeStudents"] == 2
    assert data["overview"]["totalSponsors"] == 1
    assert data["attendanceToday"] == {"total": 2, "present": 1, "absent": 0, "late": 1, "excused": 0}
    assert data["gradeDistribution"] == [{"grade": "A+", "count": 1, "percentage": 100.0}]
    assert data["performanceTrend"] == [{"month": "2025-06", "averagePercentage": 90.0, "reportCount": 1}]
    assert data["attendanceTrend"] == [
        {"date": "2025-06-15", "total": 2, "present": 1, "attendanceRate": 50.0},
    ]


def test_error_response_has_latency_header(client):
    res = client.get(f"{BASE}/school-dashboard")
    assert "X-Latency-Ms" in res.headers
