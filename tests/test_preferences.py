import pytest

from conftest import ADMIN_EMAIL, STUDENT_EMAIL, auth
from servicehours.models import PreferenceChange, Student
from servicehours.services import preference_service
from servicehours.services.errors import InvalidRequest, RecordNotFound


def _set_up(db_session, student, class_name="A2", location="Godavari"):
    preference_service.submit_preferences(
        db_session, student_id=student.student_id, class_name=class_name, location=location
    )
    db_session.commit()


def test_first_time_setup_applies_directly(client, db_session, student):
    resp = client.post(
        "/api/v1/me/preferences",
        json={"class_name": "AS", "location": "Pulchowk"},
        headers=auth(STUDENT_EMAIL),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["applied"] is True
    assert body["pending_change"] is None
    assert body["student"]["class_name"] == "AS"
    assert body["student"]["location"] == "Pulchowk"
    assert body["student"]["has_completed_setup"] is True

    session = client.post("/api/v1/session", headers=auth(STUDENT_EMAIL)).json()
    assert session["landing_path"] == "/dashboard"
    assert session["is_first_time"] is False


def test_later_change_is_queued_with_snapshot(client, db_session, student):
    _set_up(db_session, student)

    resp = client.post(
        "/api/v1/me/preferences",
        json={"class_name": "AS", "location": "Jawalakhel"},
        headers=auth(STUDENT_EMAIL),
    )
    body = resp.json()
    assert body["applied"] is False
    change = body["pending_change"]
    assert (change["current_class"], change["requested_class"]) == ("A2", "AS")
    assert (change["current_location"], change["requested_location"]) == ("Godavari", "Jawalakhel")
    assert change["student_email"] == STUDENT_EMAIL
    assert body["student"]["class_name"] == "A2"

    pending = client.get("/api/v1/me/preferences/pending", headers=auth(STUDENT_EMAIL)).json()
    assert pending["change_id"] == change["change_id"]


def test_admin_reject_leaves_record_unchanged(client, db_session, student, admin):
    _set_up(db_session, student, class_name="A2", location="Godavari")
    change = preference_service.submit_preferences(
        db_session, student_id=student.student_id, class_name="AS", location="Maitighar"
    ).pending_change
    db_session.commit()

    queue = client.get("/api/v1/admin/preference-changes", headers=auth(ADMIN_EMAIL)).json()
    assert [item["change_id"] for item in queue] == [change.change_id]

    resp = client.post(f"/api/v1/admin/preference-changes/{change.change_id}/reject", headers=auth(ADMIN_EMAIL))
    assert resp.status_code == 204

    db_session.expire_all()
    record = db_session.get(Student, student.student_id)
    assert (record.class_name, record.location) == ("A2", "Godavari")
    assert client.get("/api/v1/admin/preference-changes", headers=auth(ADMIN_EMAIL)).json() == []


def test_admin_approve_copies_values(client, db_session, student, admin):
    _set_up(db_session, student)
    change = preference_service.submit_preferences(
        db_session, student_id=student.student_id, class_name="AS", location="Satdobato"
    ).pending_change
    db_session.commit()

    resp = client.post(f"/api/v1/admin/preference-changes/{change.change_id}/approve", headers=auth(ADMIN_EMAIL))
    assert resp.status_code == 200
    assert resp.json()["class_name"] == "AS"
    assert resp.json()["location"] == "Satdobato"
    assert db_session.query(PreferenceChange).count() == 0


def test_new_request_replaces_pending_one(db_session, student):
    _set_up(db_session, student)
    first = preference_service.submit_preferences(
        db_session, student_id=student.student_id, class_name="AS", location="Godavari"
    ).pending_change
    db_session.commit()
    first_id = first.change_id

    second = preference_service.submit_preferences(
        db_session, student_id=student.student_id, class_name="A2", location="Lagankhel"
    ).pending_change
    db_session.commit()

    rows = db_session.query(PreferenceChange).all()
    assert len(rows) == 1
    assert rows[0].change_id == second.change_id != first_id
    assert rows[0].requested_location == "Lagankhel"


def test_unknown_options_and_no_op_changes_are_rejected(db_session, student):
    with pytest.raises(InvalidRequest):
        preference_service.submit_preferences(
            db_session, student_id=student.student_id, class_name="Z9", location="Godavari"
        )
    with pytest.raises(InvalidRequest):
        preference_service.submit_preferences(
            db_session, student_id=student.student_id, class_name="AS", location="Mars"
        )

    _set_up(db_session, student, class_name="AS", location="Godavari")
    with pytest.raises(InvalidRequest):
        preference_service.submit_preferences(
            db_session, student_id=student.student_id, class_name="AS", location="Godavari"
        )


def test_deciding_a_missing_change(db_session, admin):
    with pytest.raises(RecordNotFound):
        preference_service.reject_change(db_session, change_id="missing", actor_id=admin.student_id)


def test_options_endpoint(client, student):
    body = client.get("/api/v1/me/preferences/options", headers=auth(STUDENT_EMAIL)).json()
    assert body["classes"] == ["AS", "A2"]
    assert "Godavari" in body["locations"]
