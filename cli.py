"""CLI commands for event check-in staff."""

import asyncio
from uuid import UUID

import typer

from rsvp_checkin.attendance.dtos import AttendanceRecordDTO
from rsvp_checkin.attendance.errors import CheckInServiceError
from rsvp_checkin.attendance.features.check_in.write_model import StoreCheckInWriteModel
from rsvp_checkin.attendance.features.stats.read_model import StoreStatsReadModel
from rsvp_checkin.attendance.features.verify_guest.read_model import (
    LookupMethod,
    VerificationDispatcher,
)
from rsvp_checkin.attendance.repository.store import SqlAttendanceStore
from rsvp_checkin.config.database import init_db
from rsvp_checkin.config.settings import settings

app = typer.Typer(help="CLI commands for event check-in")


def _show_record(record: AttendanceRecordDTO) -> None:
    typer.secho(f"  Name: {record.full_name}", fg=typer.colors.BLUE)
    typer.secho(f"  ID: {record.id}", fg=typer.colors.CYAN)
    typer.secho(f"  State: {record.state.value}", fg=typer.colors.MAGENTA)
    if record.attending:
        typer.secho(f"  Phone: {record.phone_number}", fg=typer.colors.BLUE)
        typer.secho(f"  Confirmation code: {record.confirmation_code}", fg=typer.colors.CYAN)
        typer.secho(f"  Meals: {', '.join(m.value for m in record.meal_preferences)}", fg=typer.colors.BLUE)
        typer.secho(f"  Party of {record.family_count}", fg=typer.colors.BLUE)
        for name in record.family_members:
            typer.secho(f"    - {name}", fg=typer.colors.BLUE)
    if record.attended_at:
        typer.secho(f"  Checked in at: {record.attended_at.isoformat()}", fg=typer.colors.GREEN)


@app.command()
def stats():
    """Show registration, attendance and meal counts."""
    try:
        result = asyncio.run(StoreStatsReadModel(SqlAttendanceStore()).get_stats())
    except CheckInServiceError as e:
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho(f"{settings.event_name}", fg=typer.colors.GREEN)
    typer.secho(f"  Registrations: {result.total_registrations}", fg=typer.colors.BLUE)
    typer.secho(f"  Attending: {result.total_attending}", fg=typer.colors.BLUE)
    typer.secho(f"  Checked in: {result.total_checked_in}", fg=typer.colors.CYAN)
    typer.secho(f"  Veg: {result.veg_count}", fg=typer.colors.BLUE)
    typer.secho(f"  Non-veg: {result.non_veg_count}", fg=typer.colors.BLUE)


@app.command()
def lookup(
    code: str = typer.Option(
        None,
        "--code",
        "-c",
        help="4-digit confirmation code",
    ),
    phone: str = typer.Option(
        None,
        "--phone",
        "-p",
        help="Phone number the guest registered with",
    ),
):
    """Find a registration by confirmation code or phone number."""
    if bool(code) == bool(phone):
        typer.secho("Pass exactly one of --code or --phone", fg=typer.colors.RED)
        raise typer.Exit(2)

    method, value = (LookupMethod.CODE, code) if code else (LookupMethod.PHONE, phone)
    try:
        record = asyncio.run(VerificationDispatcher(SqlAttendanceStore()).resolve(method, value))
    except CheckInServiceError as e:
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho("Registration found", fg=typer.colors.GREEN)
    _show_record(record)


@app.command()
def check_in(
    record_id: str = typer.Argument(
        ...,
        help="Attendance record UUID",
    ),
):
    """Mark a confirmed guest as attended.

    Check-ins made here are not pushed to connected dashboards; they show up once a dashboard reloads.
    """
    try:
        parsed_id = UUID(record_id)
    except ValueError:
        typer.secho(f"Not a valid record id: {record_id}", fg=typer.colors.RED)
        raise typer.Exit(2)

    try:
        result = asyncio.run(StoreCheckInWriteModel(SqlAttendanceStore()).check_in(parsed_id))
    except CheckInServiceError as e:
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho("Successfully marked as attended", fg=typer.colors.GREEN)
    _show_record(result.record)


@app.command("init-db")
def init_database():
    """Apply all database migrations."""
    asyncio.run(init_db())
    typer.secho("Database is up to date", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
