import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from radio_registry.core.errors import ConflictError, NotFoundError, ValidationError
from radio_registry.crud import radios as radios_crud
from radio_registry.crud.logs import list_logs
from radio_registry.crud.radios import (
    bulk_create_radios,
    create_radio,
    delete_radio,
    describe_changes,
    get_radio,
    get_radio_by_serial,
    list_radios,
    update_radio,
)
from radio_registry.db.session import Base
from radio_registry.models.audit_log import AuditLog
from radio_registry.models.radio import Radio


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def _payload(**overrides):
    data = {
        "serial_number": "MTR001",
        "model": "CP200",
        "operator_name": "Alice",
    }
    data.update(overrides)
    return data


def _audit_entries(db_session):
    return db_session.execute(select(AuditLog).order_by(AuditLog.id)).scalars().all()


def test_create_radio_normalizes_serial_and_defaults_status(db_session):
    radio = create_radio(db_session, _payload(serial_number="  mtr001 "), ip_address="10.0.0.5")

    stored = get_radio(db_session, radio.id)
    assert stored is not None
    assert stored.serial_number == "MTR001"
    assert stored.status == "active"
    assert stored.created_at == stored.updated_at
    assert stored.created_by_ip == "10.0.0.5"
    assert stored.operator_name == "Alice"


def test_create_radio_writes_one_add_entry(db_session):
    radio = create_radio(db_session, _payload(), ip_address="10.0.0.5")

    entries = _audit_entries(db_session)
    assert len(entries) == 1
    entry = entries[0]
    assert entry.action == "ADD"
    assert entry.radio_id == radio.id
    assert entry.radio_serial == "MTR001"
    assert entry.details == "Added radio: CP200"
    assert entry.operator_name == "Alice"
    assert entry.ip_address == "10.0.0.5"


@pytest.mark.parametrize("missing", ["serial_number", "model", "operator_name"])
def test_create_radio_requires_fields(db_session, missing):
    with pytest.raises(ValidationError):
        create_radio(db_session, _payload(**{missing: "  "}))

    assert db_session.execute(select(Radio)).scalars().all() == []
    assert _audit_entries(db_session) == []


def test_duplicate_serial_is_rejected_with_existing_record(db_session):
    original = create_radio(db_session, _payload(user_name="Bob"))

    with pytest.raises(ConflictError) as excinfo:
        create_radio(db_session, _payload(serial_number="mtr001", model="XPR3300"))

    assert excinfo.value.existing.id == original.id
    assert excinfo.value.existing.user_name == "Bob"
    assert len(db_session.execute(select(Radio)).scalars().all()) == 1
    assert [e.action for e in _audit_entries(db_session)] == ["ADD"]


def test_get_radio_by_serial_is_case_insensitive(db_session):
    radio = create_radio(db_session, _payload())

    assert get_radio_by_serial(db_session, "mtr001").id == radio.id
    assert get_radio_by_serial(db_session, "NOPE") is None
    assert get_radio_by_serial(db_session, "") is None


def test_list_radios_orders_newest_first_and_limits(db_session):
    for serial in ("A1", "A2", "A3"):
        create_radio(db_session, _payload(serial_number=serial))

    assert [r.serial_number for r in list_radios(db_session)] == ["A3", "A2", "A1"]
    assert [r.serial_number for r in list_radios(db_session, limit=2)] == ["A3", "A2"]


def test_list_radios_search_matches_substrings_case_insensitively(db_session):
    create_radio(db_session, _payload(serial_number="TP001", model="Tait TP9300", user_name="John Smith"))
    create_radio(db_session, _payload(serial_number="KWD001", model="Kenwood TK-3402", location="Workshop"))
    create_radio(db_session, _payload(serial_number="HYT001", model="Hytera PD405", radio_id="55501"))

    assert [r.serial_number for r in list_radios(db_session, search="smith")] == ["TP001"]
    assert [r.serial_number for r in list_radios(db_session, search="WORKSHOP")] == ["KWD001"]
    assert [r.serial_number for r in list_radios(db_session, search="555")] == ["HYT001"]
    assert {r.serial_number for r in list_radios(db_session, search="001")} == {"TP001", "KWD001", "HYT001"}


def test_list_radios_search_treats_wildcards_literally(db_session):
    create_radio(db_session, _payload(serial_number="PCT001", notes="x", location="100% coverage"))
    create_radio(db_session, _payload(serial_number="PCT002", location="1000 coverage"))

    assert [r.serial_number for r in list_radios(db_session, search="0%")] == ["PCT001"]
    assert [r.serial_number for r in list_radios(db_session, search="_")] == []


def test_list_radios_exact_filters_combine(db_session):
    create_radio(db_session, _payload(serial_number="S1", department="Security", shift="Day Shift"))
    create_radio(db_session, _payload(serial_number="S2", department="Security", shift="Night Shift"))
    create_radio(db_session, _payload(serial_number="M1", department="Maintenance", shift="Day Shift",
                                      status="maintenance", version="v2", user_name="Lisa"))

    assert {r.serial_number for r in list_radios(db_session, department="Security")} == {"S1", "S2"}
    assert [r.serial_number for r in list_radios(db_session, department="Security", shift="Day Shift")] == ["S1"]
    assert [r.serial_number for r in list_radios(db_session, status="maintenance")] == ["M1"]
    assert [r.serial_number for r in list_radios(db_session, user="Lisa", version="v2")] == ["M1"]
    assert list_radios(db_session, department="Secur") == []
    assert [r.serial_number for r in list_radios(db_session, model="CP200", limit=1)] == ["M1"]


def test_update_radio_replaces_fields_and_logs_status_change_only(db_session):
    radio = create_radio(db_session, _payload(department="Security", shift="Day Shift"))
    created_at = radio.created_at

    updated = update_radio(
        db_session,
        radio.id,
        _payload(department="Security", shift="Day Shift", status="maintenance", operator_name="Carol"),
    )

    assert updated.status == "maintenance"
    assert updated.operator_name == "Carol"
    assert updated.created_at == created_at
    assert updated.updated_at >= created_at

    entry = _audit_entries(db_session)[-1]
    assert entry.action == "UPDATE"
    assert entry.radio_serial == "MTR001"
    assert entry.details == "Updated radio: status: active → maintenance"
    assert entry.details.count("→") == 1


def test_update_radio_reports_every_changed_field_in_order(db_session):
    radio = create_radio(db_session, _payload(user_name="Bob", location="Gate"))

    update_radio(
        db_session,
        radio.id,
        _payload(model="XPR3300", user_name="Dan", location="Pit", radio_id="777"),
    )

    entry = _audit_entries(db_session)[-1]
    assert entry.details == (
        "Updated radio: radio_id:  → 777, model: CP200 → XPR3300, user: Bob → Dan, location: Gate → Pit"
    )


def test_update_radio_unknown_id_raises_not_found(db_session):
    with pytest.raises(NotFoundError):
        update_radio(db_session, "missing", _payload())
    assert _audit_entries(db_session) == []


def test_update_radio_requires_fields(db_session):
    radio = create_radio(db_session, _payload())
    with pytest.raises(ValidationError):
        update_radio(db_session, radio.id, _payload(model=None))
    assert len(_audit_entries(db_session)) == 1


def test_update_radio_rejects_serial_of_another_radio(db_session):
    create_radio(db_session, _payload(serial_number="A1"))
    second = create_radio(db_session, _payload(serial_number="A2"))

    with pytest.raises(ConflictError) as excinfo:
        update_radio(db_session, second.id, _payload(serial_number="a1"))
    assert excinfo.value.existing.serial_number == "A1"



def test_update_radio_serial_race_becomes_conflict(db_session, monkeypatch):
    first = create_radio(db_session, _payload(serial_number="A1"))
    second = create_radio(db_session, _payload(serial_number="A2"))

    real_lookup = radios_crud.get_radio_by_serial
    calls = []

    def stale_lookup(db, serial):
        # The pre-commit check misses a serial that another writer just claimed.
        calls.append(serial)
        return None if len(calls) == 1 else real_lookup(db, serial)

    monkeypatch.setattr(radios_crud, "get_radio_by_serial", stale_lookup)

    with pytest.raises(ConflictError) as excinfo:
        update_radio(db_session, second.id, _payload(serial_number="A1"))

    assert excinfo.value.existing.id == first.id
    assert real_lookup(db_session, "A2").id == second.id
    assert [e.action for e in _audit_entries(db_session)] == ["ADD", "ADD"]


def test_delete_radio_removes_record_and_logs(db_session):
    radio = create_radio(db_session, _payload())
    radio_id = radio.id

    delete_radio(db_session, radio_id, "Alice", ip_address="10.0.0.9")

    assert get_radio(db_session, radio_id) is None
    entry = _audit_entries(db_session)[-1]
    assert entry.action == "DELETE"
    assert entry.radio_id == radio_id
    assert entry.radio_serial == "MTR001"
    assert entry.details == "Deleted radio: CP200"
    assert entry.ip_address == "10.0.0.9"


def test_delete_radio_validates_operator_and_existence(db_session):
    radio = create_radio(db_session, _payload())

    with pytest.raises(ValidationError):
        delete_radio(db_session, radio.id, "")
    with pytest.raises(NotFoundError):
        delete_radio(db_session, "missing", "Alice")

    assert get_radio(db_session, radio.id) is not None
    assert len(_audit_entries(db_session)) == 1


def test_bulk_create_collects_row_errors(db_session):
    create_radio(db_session, _payload(serial_number="EXIST1"))

    result = bulk_create_radios(
        db_session,
        [
            {"serial_number": "new1", "model": "CP200"},
            {"serial_number": "exist1", "model": "CP200"},
            {"serial_number": "NEW2", "model": "XPR3300"},
            {"serial_number": "NEW1", "model": "CP200"},
            {"serial_number": "NEW3"},
        ],
        "Importer",
        ip_address="10.0.0.7",
    )

    assert result["success_count"] == 2
    assert result["error_count"] == 3
    assert result["errors"] == [
        "Row 2: Radio EXIST1 already exists",
        "Row 4: Radio NEW1 already exists",
        "Row 5: Serial number and model are required",
    ]
    assert get_radio_by_serial(db_session, "NEW1").operator_name == "Importer"

    entries = _audit_entries(db_session)[1:]
    assert [e.action for e in entries] == ["ADD", "ADD", "BULK_IMPORT"]
    assert entries[0].details == "Bulk import: Added radio CP200"
    assert entries[-1].details == "Bulk import completed: 2 success, 3 errors"
    assert entries[-1].radio_id is None


def test_bulk_create_requires_operator_and_rows(db_session):
    with pytest.raises(ValidationError):
        bulk_create_radios(db_session, [{"serial_number": "A", "model": "B"}], None)
    with pytest.raises(ValidationError):
        bulk_create_radios(db_session, [], "Importer")
    assert _audit_entries(db_session) == []


def test_describe_changes_ignores_untracked_fields():
    before = {"status": "active", "notes": "old"}
    after = {"status": "active", "notes": "new"}
    assert describe_changes(before, after) == []


def test_audit_failure_does_not_undo_mutation(db_session):
    AuditLog.__table__.drop(db_session.get_bind())

    radio = create_radio(db_session, _payload())

    assert get_radio_by_serial(db_session, "MTR001").id == radio.id


def test_list_logs_returns_newest_first(db_session):
    for serial in ("L1", "L2", "L3"):
        create_radio(db_session, _payload(serial_number=serial))

    logs = list_logs(db_session, limit=2)
    assert [entry.radio_serial for entry in logs] == ["L3", "L2"]
