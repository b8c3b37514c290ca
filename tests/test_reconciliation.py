from datetime import date

from conftest import ADMIN_EMAIL, auth
from servicehours.models import SchemaMigration, Student
from servicehours.services import approval_service, ledger_service, migration_service, reconciliation_service


def _approved(db_session, student, admin, hours):
    entry = ledger_service.submit_entry(
        db_session,
        student_id=student.student_id,
        title="Clean-up drive",
        description="Riverbank",
        hours=hours,
        entry_date=date(2025, 7, 1),
    )
    approval_service.approve(db_session, service_hour_id=entry.service_hour_id, verifier_id=admin.student_id)
    db_session.commit()
    return entry


def test_consistent_ledger_reports_nothing(db_session, student, admin):
    _approved(db_session, student, admin, 4)
    _approved(db_session, student, admin, 2.5)
    assert reconciliation_service.find_discrepancies(db_session) == []


def test_drift_is_reported_and_repaired(client, db_session, student, admin):
    _approved(db_session, student, admin, 4)
    student.total_hours = 11
    db_session.commit()

    report = client.get("/api/v1/admin/reconciliation", headers=auth(ADMIN_EMAIL)).json()
    assert report["repaired"] is False
    assert report["discrepancies"] == [
        {
            "student_id": student.student_id,
            "email": student.email,
            "stored_total": 11,
            "ledger_total": 4,
            "difference": 7,
        }
    ]

    report = client.post("/api/v1/admin/reconciliation/repair", headers=auth(ADMIN_EMAIL)).json()
    assert report["repaired"] is True
    assert len(report["discrepancies"]) == 1

    db_session.expire_all()
    assert db_session.get(Student, student.student_id).total_hours == 4
    assert reconciliation_service.find_discrepancies(db_session) == []


def test_students_without_entries_must_have_zero_total(db_session, student):
    student.total_hours = 3
    db_session.commit()
    [item] = reconciliation_service.find_discrepancies(db_session)
    assert item.ledger_total == 0
    assert item.difference == 3


def test_required_hours_migration_runs_once(db_session, make_student):
    drifted = make_student("070bscs099@sxc.edu.np", required_hours=40)

    assert migration_service.run_pending(db_session) == ["0001_required_hours_baseline"]
    db_session.commit()
    assert drifted.required_hours == 50
    assert db_session.get(SchemaMigration, "0001_required_hours_baseline") is not None

    drifted.required_hours = 35
    db_session.commit()
    assert migration_service.run_pending(db_session) == []
    db_session.commit()
    assert drifted.required_hours == 35


def test_scheduled_job_repairs_when_enabled(db_session, student, admin):
    from servicehours.jobs import run_reconciliation_once

    _approved(db_session, student, admin, 6)
    student.total_hours = 1
    db_session.commit()

    assert run_reconciliation_once(auto_repair=False) == {"discrepancies": 1, "repaired": 0}
    assert run_reconciliation_once(auto_repair=True) == {"discrepancies": 1, "repaired": 1}

    db_session.expire_all()
    assert db_session.get(Student, student.student_id).total_hours == 6
