from datetime import datetime, timezone
from decimal import Decimal

from app.models import AuditLog
from app.services.audit import model_snapshot, record_audit_log
from conftest import FakeAsyncSession, make_loan, make_user


def test_snapshot_drops_secret_columns():
    snapshot = model_snapshot(make_user())

    assert snapshot["email"] == "user@example.com"
    for column in ("hashed_password", "national_id_encrypted", "tax_id_encrypted"):
        assert column not in snapshot


def test_snapshot_serializes_values():
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    snapshot = model_snapshot(make_loan(interest_rate=Decimal("9.250"), created_at=created))

    assert snapshot["interest_rate"] == "9.250"
    assert snapshot["created_at"] == created.isoformat()
    assert isinstance(snapshot["id"], str)


def test_record_audit_log_diff_and_summary():
    db = FakeAsyncSession()

    entry = record_audit_log(
        db,
        actor_id=None,
        action="loan.updated",
        resource_type="loan",
        resource_id="abc",
        old_value={"loan_name": "A", "tenure_months": 12, "description": "same"},
        new_value={"loan_name": "B", "tenure_months": 24, "description": "same"},
    )

    assert db.added == [entry]
    assert isinstance(entry, AuditLog)
    assert entry.changes == {
        "loan_name": {"from": "A", "to": "B"},
        "tenure_months": {"from": 12, "to": 24},
    }
    assert entry.summary == "loan.updated: loan_name, tenure_months"


def test_record_audit_log_without_changes():
    entry = record_audit_log(
        FakeAsyncSession(),
        actor_id=None,
        action="settings.updated",
        resource_type="app_settings",
        resource_id="site",
        old_value={"a": "1"},
        new_value={"a": "1"},
    )

    assert entry.changes is None
    assert entry.summary == "settings.updated"
