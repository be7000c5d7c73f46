"""Tests del Control-State Store (tres backends) y del Command Gate."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from sensor_api.control import (
    ControlCommandGate,
    FileControlStateStore,
    InMemoryControlStateStore,
    SqlControlStateStore,
    parse_command_value,
)
from sensor_api.errors import StorageUnavailable, UnknownActuator, ValidationError


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(params=["memory", "file", "db"])
def store(request, tmp_path, db_session):
    if request.param == "memory":
        return InMemoryControlStateStore()
    if request.param == "file":
        return FileControlStateStore(tmp_path / "state")
    return SqlControlStateStore(db_session)


# =============================================================================
# TESTS: STORE
# =============================================================================

class TestControlStateStore:
    """Mismo contrato para todos los backends."""

    def test_default_is_off(self, store):
        flag = store.get_flag("relay")
        assert flag.value is False
        assert flag.updated_at is None

    def test_read_your_write(self, store):
        store.set_flag("relay", True)
        assert store.get_flag("relay").value is True
        store.set_flag("relay", False)
        assert store.get_flag("relay").value is False

    def test_flags_are_independent(self, store):
        store.set_flag("relay", True)
        assert store.get_flag("led").value is False

    def test_repeated_write_is_idempotent(self, store):
        store.set_flag("led", True)
        store.set_flag("led", True)
        assert store.get_flag("led").value is True

    def test_set_returns_timestamp(self, store):
        flag = store.set_flag("led", True)
        assert flag.updated_at is not None
        assert store.get_flag("led").updated_at is not None


class TestFileStore:

    def test_file_contents(self, tmp_path):
        store = FileControlStateStore(tmp_path)
        store.set_flag("relay", True)
        assert (tmp_path / "relay_state.txt").read_text() == "1"

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        with pytest.raises(StorageUnavailable):
            FileControlStateStore(blocker).set_flag("relay", True)


class TestSqlStore:

    def test_db_failure_is_storage_unavailable(self):
        session = MagicMock()
        session.execute.side_effect = OperationalError("UPDATE", {}, Exception("db down"))
        with pytest.raises(StorageUnavailable):
            SqlControlStateStore(session).set_flag("relay", True)
        session.rollback.assert_called()


# =============================================================================
# TESTS: COMMAND GATE
# =============================================================================

class TestCommandGate:

    @pytest.fixture
    def gate(self):
        return ControlCommandGate(InMemoryControlStateStore())

    def test_command_sets_flag(self, gate):
        flag = gate.command("relay", {"relay_on": "1"})
        assert flag.value is True
        assert gate.get("relay").value is True

    def test_missing_param_is_validation_error(self, gate):
        with pytest.raises(ValidationError) as exc:
            gate.command("relay", {})
        assert "relay_on" in exc.value.message

    def test_wrong_param_name_is_missing(self, gate):
        with pytest.raises(ValidationError):
            gate.command("led", {"relay_on": True})

    def test_unparseable_value(self):
        with pytest.raises(ValidationError):
            parse_command_value("sometimes", param="led_on")

    def test_non_string_values_use_truthiness(self):
        assert parse_command_value([1], param="relay_on") is True
        assert parse_command_value({}, param="relay_on") is False

    def test_json_list_command_accepted(self, gate):
        assert gate.command("relay", {"relay_on": [1]}).value is True

    def test_unknown_actuator(self, gate):
        with pytest.raises(UnknownActuator) as exc:
            gate.get("fan")
        assert exc.value.status_code == 404

    def test_snapshot(self, gate):
        gate.command("led", {"led_on": True})
        snap = gate.snapshot()
        assert snap["led"].value is True
        assert snap["relay"].value is False
