import pytest
from httpx import AsyncClient

from app.core.dates import today


@pytest.mark.asyncio
async def test_dashboard_empty(client: AsyncClient, auth_headers, teacher) -> None:
    response = await client.get("/api/v1/dashboard/stats", headers=auth_headers(teacher))
    assert response.status_code == 200
    body = response.json()
    assert body["totalStudents"] == 0
    assert body["presentToday"] == 0
    assert body["absentToday"] == 0
    assert body["totalActivities"] == 0
    assert body["attendanceRate"] == 0
    assert body["recentAttendance"] == []
    assert body["recentActivities"] == []


@pytest.mark.asyncio
async def test_dashboard_counts_today(client: AsyncClient, auth_headers, make_user, teacher) -> None:
    students = [await make_user("student", f"Pupil {i}") for i in range(4)]
    day = today().isoformat()
    statuses = ["present", "late", "absent", "present"]
    records = [
        {"studentId": str(s.id), "date": day, "status": status}
        for s, status in zip(students, statuses)
    ]
    # An older record that must not count towards today
    records.append({"studentId": str(students[2].id), "date": "2020-01-01", "status": "present"})
    await client.post("/api/v1/attendance/mark", json={"records": records}, headers=auth_headers(teacher))
    await client.post(
        "/api/v1/activities",
        json={"studentId": str(students[0].id), "title": "Robotics", "category": "Technology", "date": day},
        headers=auth_headers(teacher),
    )

    response = await client.get("/api/v1/dashboard/stats", headers=auth_headers(students[0]))
    body = response.json()
    assert body["totalStudents"] == 4
    assert body["presentToday"] == 3
    assert body["absentToday"] == 1
    assert body["attendanceRate"] == 75
    assert body["totalActivities"] == 1
    assert len(body["recentAttendance"]) == 5
    assert body["recentAttendance"][-1]["date"] == "2020-01-01"
    assert body["recentActivities"][0]["title"] == "Robotics"
