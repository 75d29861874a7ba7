"""CSV/JSON export of registrations and analytics logs."""
import csv
import io
import json
from datetime import date
from typing import Any, Iterable, List, Optional, Sequence

from eventportal.models.analytics import AttemptLog
from eventportal.models.registration import RegistrationRow
from eventportal.utils.time_utils import format_datetime, format_timestamp

REGISTRATION_COLUMNS = [
    "Name",
    "Email",
    "Mobile",
    "Hospital",
    "Speciality",
    "Event",
    "Event Code",
    "Registered At",
]

LOG_COLUMNS = ["Timestamp", "Status", "User ID", "Message", "IP Address"]

EXPORT_FORMATS = ("csv", "json")


def to_csv(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """
    Serialize rows to CSV.

    Every cell is double-quoted and embedded quotes are doubled; lines are
    joined with "\\n" and there is no trailing newline. None becomes "".
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if value is None else str(value) for value in row])
    return buffer.getvalue().rstrip("\n")


def registration_cells(row: RegistrationRow) -> List[str]:
    return [
        row.name,
        row.email,
        row.mobile,
        row.hospital,
        row.speciality,
        row.event_title,
        row.event_code,
        format_timestamp(row.timestamp) if row.timestamp else "",
    ]


def registrations_to_csv(rows: Iterable[RegistrationRow]) -> str:
    """CSV of registration rows with the fixed registration columns."""
    return to_csv(REGISTRATION_COLUMNS, (registration_cells(row) for row in rows))


def logs_to_csv(logs: Iterable[AttemptLog]) -> str:
    """CSV of join-attempt logs; missing values read "N/A"."""
    return to_csv(
        LOG_COLUMNS,
        (
            [
                format_datetime(log.occurred_at, "%m/%d/%Y, %I:%M:%S %p"),
                log.status,
                log.user if log.user else "N/A",
                log.message or "N/A",
                log.ip or "N/A",
            ]
            for log in logs
        ),
    )


def registrations_to_json(rows: Iterable[RegistrationRow]) -> str:
    """JSON array of registration rows keyed by the CSV column names."""
    records = [dict(zip(REGISTRATION_COLUMNS, registration_cells(row))) for row in rows]
    return json.dumps(records, ensure_ascii=False, indent=2)


def export_registrations(rows: Sequence[RegistrationRow], fmt: str) -> str:
    """
    Render rows in the requested format.

    Raises:
        ValueError: If fmt is not "csv" or "json"
    """
    if fmt == "csv":
        return registrations_to_csv(rows)
    if fmt == "json":
        return registrations_to_json(rows)
    raise ValueError(f"Export format must be one of {EXPORT_FORMATS}, got: {fmt}")


def export_filename(prefix: str, extension: str, scope: Optional[str] = None, on: Optional[date] = None) -> str:
    """e.g. registrations_filtered_2025-11-15.csv"""
    day = (on or date.today()).isoformat()
    parts = [prefix] + ([scope] if scope else []) + [day]
    return f"{'_'.join(parts)}.{extension}"


def mime_type(extension: str) -> str:
    return {"csv": "text/csv", "json": "application/json"}.get(extension, "application/octet-stream")
