from datetime import date

from conftest import ADMIN_EMAIL, STUDENT_EMAIL, auth
from servicehours.models import ServiceHourStatus, Student
from servicehours.services import approval_service, ledger_service


def _submit(client, **overrides):
    body = {
        "title": "Blood donation camp",
        "description": "Registration desk",
        "hours": 4,
        "date": "2025-11-08",
    }
    body.update(overrides)
    return client.post("/api/v1/me/service-hours", json=body, headers=auth(STUDENT_EMAIL))


def test_submit_is_pending_and_leaves_total_unchanged(client, db_session, student):
    student.total_hours = 20
    db_session.commit()

    resp = _submit(client, hours=10)
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "pending"
    assert body["is_punishment"] is False

    db_session.expire_all()
    assert db_session.get(Student, student.student_id).total_hours == 20


def test_submit_ignores_punishment_flag_from_students(client, student):
    resp = _submit(client, is_punishment=True)
    assert resp.status_code == 201
    assert resp.json()["is_punishment"] is False


def test_submit_requires_title_description_and_non_negative_hours(client, student):
    assert _submit(client, title="   ").status_code == 422
    assert _submit(client, description="").status_code == 422
    assert _submit(client, hours=-1).status_code == 422
    assert _submit(client, hours=0).status_code == 201


def test_submit_without_record_is_not_found(client):
    assert _submit(client).status_code == 404


def test_list_is_newest_first_with_cursor_pages(client, db_session, student):
    for day in range(1, 6):
        ledger_service.submit_entry(
            db_session,
            student_id=student.student_id,
            title=f"Activity {day}",
            description="Community clean-up",
            hours=1,
            entry_date=date(2025, 3, day),
        )
    db_session.commit()

    first = client.get("/api/v1/me/service-hours?limit=2", headers=auth(STUDENT_EMAIL)).json()
    assert [item["date"] for item in first["items"]] == ["2025-03-05", "2025-03-04"]
    assert first["has_more"] is True

    second = client.get(
        f"/api/v1/me/service-hours?limit=2&cursor={first['next_cursor']}", headers=auth(STUDENT_EMAIL)
    ).json()
    assert [item["date"] for item in second["items"]] == ["2025-03-03", "2025-03-02"]

    third = client.get(
        f"/api/v1/me/service-hours?limit=2&cursor={second['next_cursor']}", headers=auth(STUDENT_EMAIL)
    ).json()
    assert [item["date"] for item in third["items"]] == ["2025-03-01"]
    assert third["has_more"] is False
    assert third["next_cursor"] is None


def test_cursor_pages_do_not_skip_entries_sharing_a_date(db_session, student):
    ids = set()
    for n in range(5):
        entry = ledger_service.submit_entry(
            db_session,
            student_id=student.student_id,
            title=f"Shift {n}",
            description="Library desk",
            hours=2,
            entry_date=date(2025, 4, 1),
        )
        ids.add(entry.service_hour_id)
    db_session.commit()

    seen = []
    cursor = None
    while True:
        page = ledger_service.list_entries(db_session, student_id=student.student_id, limit=2, cursor=cursor)
        seen.extend(item.service_hour_id for item in page.items)
        if not page.has_more:
            break
        cursor = page.next_cursor
    assert len(seen) == 5
    assert set(seen) == ids


def test_list_filters_by_status(client, db_session, student, admin):
    keep = ledger_service.submit_entry(
        db_session, student_id=student.student_id, title="A", description="a", hours=1, entry_date=date(2025, 1, 1)
    )
    ledger_service.submit_entry(
        db_session, student_id=student.student_id, title="B", description="b", hours=1, entry_date=date(2025, 1, 2)
    )
    approval_service.approve(db_session, service_hour_id=keep.service_hour_id, verifier_id=admin.student_id)
    db_session.commit()

    resp = client.get("/api/v1/me/service-hours?status=approved", headers=auth(STUDENT_EMAIL))
    items = resp.json()["items"]
    assert [item["title"] for item in items] == ["A"]


def test_invalid_cursor_is_bad_request(client, student):
    resp = client.get("/api/v1/me/service-hours?cursor=garbage", headers=auth(STUDENT_EMAIL))
    assert resp.status_code == 400


def test_delete_approved_entry_reverses_credit(client, db_session, student, admin):
    entry = ledger_service.submit_entry(
        db_session, student_id=student.student_id, title="Tutoring", description="Math", hours=6, entry_date=date(2025, 2, 1)
    )
    approval_service.approve(db_session, service_hour_id=entry.service_hour_id, verifier_id=admin.student_id)
    db_session.commit()
    assert student.total_hours == 6

    resp = client.delete(f"/api/v1/admin/service-hours/{entry.service_hour_id}", headers=auth(ADMIN_EMAIL))
    assert resp.status_code == 204
    db_session.expire_all()
    assert db_session.get(Student, student.student_id).total_hours == 0


def test_delete_floors_total_at_zero(db_session, student, admin):
    entry = ledger_service.submit_entry(
        db_session, student_id=student.student_id, title="Camp", description="Setup", hours=8, entry_date=date(2025, 2, 1)
    )
    approval_service.approve(db_session, service_hour_id=entry.service_hour_id, verifier_id=admin.student_id)
    student.total_hours = 3
    db_session.commit()

    ledger_service.delete_entry(db_session, service_hour_id=entry.service_hour_id, actor_id=admin.student_id)
    db_session.commit()
    assert student.total_hours == 0


def test_delete_pending_entry_leaves_total(db_session, student, admin):
    student.total_hours = 12
    entry = ledger_service.submit_entry(
        db_session, student_id=student.student_id, title="Camp", description="Setup", hours=8, entry_date=date(2025, 2, 1)
    )
    db_session.commit()

    ledger_service.delete_entry(db_session, service_hour_id=entry.service_hour_id, actor_id=admin.student_id)
    db_session.commit()
    assert student.total_hours == 12


def test_delete_unknown_entry_is_not_found(client, admin):
    assert client.delete("/api/v1/admin/service-hours/missing", headers=auth(ADMIN_EMAIL)).status_code == 404


def test_students_cannot_delete(client, db_session, student):
    entry = ledger_service.submit_entry(
        db_session, student_id=student.student_id, title="Camp", description="Setup", hours=1, entry_date=date(2025, 2, 1)
    )
    db_session.commit()
    resp = client.delete(f"/api/v1/admin/service-hours/{entry.service_hour_id}", headers=auth(STUDENT_EMAIL))
    assert resp.status_code == 403


def test_dashboard_groups_hours_by_status(client, db_session, student, admin):
    approved = ledger_service.submit_entry(
        db_session, student_id=student.student_id, title="A", description="a", hours=3, entry_date=date(2025, 1, 1)
    )
    rejected = ledger_service.submit_entry(
        db_session, student_id=student.student_id, title="B", description="b", hours=2, entry_date=date(2025, 1, 2)
    )
    ledger_service.submit_entry(
        db_session, student_id=student.student_id, title="C", description="c", hours=1.5, entry_date=date(2025, 1, 3)
    )
    approval_service.approve(db_session, service_hour_id=approved.service_hour_id, verifier_id=admin.student_id)
    approval_service.reject(db_session, service_hour_id=rejected.service_hour_id, verifier_id=admin.student_id)
    db_session.commit()

    body = client.get("/api/v1/me/dashboard", headers=auth(STUDENT_EMAIL)).json()
    assert body["hours_by_status"] == {"pending": 1.5, "approved": 3, "rejected": 2}
    assert body["student"]["total_hours"] == 3
    assert body["student"]["remaining_hours"] == 47
    assert len(body["recent"]["items"]) == 3
    assert body["recent"]["items"][0]["status"] == ServiceHourStatus.PENDING.value
