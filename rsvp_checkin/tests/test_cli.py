from uuid import uuid4

import pytest
from typer.testing import CliRunner

import cli
from rsvp_checkin.attendance.dtos import AttendanceRecordDTO, MealPreference
from rsvp_checkin.attendance.repository.tests.inmemory_store import InMemoryAttendanceStore

runner = CliRunner()


@pytest.fixture
def confirmed() -> AttendanceRecordDTO:
    return AttendanceRecordDTO(
        id=uuid4(),
        full_name="Asha Rao",
        attending=True,
        phone_number="9998887777",
        meal_preferences=[MealPreference.VEG],
        confirmation_code="4821",
    )


def test_check_in_help_mentions_dashboards():
    result = runner.invoke(cli.app, ["check-in", "--help"])

    assert result.exit_code == 0
    assert "dashboards" in result.output


def test_check_in_marks_guest_attended(monkeypatch, confirmed):
    store = InMemoryAttendanceStore(records=[confirmed])
    monkeypatch.setattr(cli, "SqlAttendanceStore", lambda: store)

    result = runner.invoke(cli.app, ["check-in", str(confirmed.id)])

    assert result.exit_code == 0
    assert "Successfully marked as attended" in result.output
    assert store.records[0].attended_at is not None


def test_check_in_rejects_bad_record_id():
    result = runner.invoke(cli.app, ["check-in", "not-a-uuid"])

    assert result.exit_code == 2
    assert "Not a valid record id" in result.output
