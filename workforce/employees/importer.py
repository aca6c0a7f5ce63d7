"""Bulk employee import from ``.xlsx`` or ``.csv`` and the import template.

Sheet columns: name, mobile, aadhar, pan, address, type, salary,
dailyRate, supervisorId, joinDate. Row numbers reported back are
spreadsheet rows, so the first data row is row 2.
"""

from __future__ import annotations

import csv
import io
import logging
import uuid
import zipfile
from datetime import date, datetime
from typing import Any, Iterator, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import BaseModel, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from workforce.common.exceptions import ValidationException

logger = logging.getLogger(__name__)

TEMPLATE_COLUMNS = [
    "name", "mobile", "aadhar", "pan", "address", "type",
    "salary", "dailyRate", "supervisorId", "joinDate",
]

TEMPLATE_ROWS = [
    ["John Doe", "9876543210", "123456789012", "ABCDE1234F", "123 Street, City",
     "FIXED", 30000, None, None, "2024-01-01"],
    ["Jane Smith", "9876543211", "123456789013", "ABCDE1234G", "456 Avenue, City",
     "DAILY", None, 500, None, "2024-01-15"],
]

SUPPORTED_EXTENSIONS = (".xlsx", ".csv")
UNSUPPORTED_FORMAT_MESSAGE = (
    "Unsupported file type. Upload an Excel workbook (.xlsx) or a CSV file (.csv); "
    "re-save older .xls sheets as .xlsx first."
)


# ═════════════════════════════════════════════════════════════════════
# Row validation
# ═════════════════════════════════════════════════════════════════════


def _fail(field: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(field, message)


class ImportRow(BaseModel):
    """One sheet row after cell normalisation."""

    name: str
    mobile: str
    aadhar: Optional[str] = None
    pan: Optional[str] = None
    address: Optional[str] = None
    type: str
    salary: Optional[float] = None
    dailyRate: Optional[float] = None
    supervisorId: Optional[uuid.UUID] = None
    joinDate: date

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise _fail("name", "Name is required")
        if len(value) > 100:
            raise _fail("name", "Name must be less than 100 characters")
        return value

    @field_validator("mobile")
    @classmethod
    def _check_mobile(cls, value: str) -> str:
        if not (len(value) == 10 and value.isdigit()):
            raise _fail("mobile", "Mobile must be 10 digits")
        return value

    @field_validator("aadhar")
    @classmethod
    def _check_aadhar(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not (len(value) == 12 and value.isdigit()):
            raise _fail("aadhar", "Aadhar must be 12 digits")
        return value

    @field_validator("pan")
    @classmethod
    def _check_pan(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.upper()
        valid = (
            len(value) == 10
            and value[:5].isalpha()
            and value[5:9].isdigit()
            and value[9].isalpha()
        )
        if not valid:
            raise _fail("pan", "Invalid PAN format")
        return value

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) > 500:
            raise _fail("address", "Address must be less than 500 characters")
        return value

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        value = value.upper()
        if value not in ("FIXED", "DAILY"):
            raise _fail("type", "Type must be FIXED or DAILY")
        return value

    @field_validator("salary", "dailyRate")
    @classmethod
    def _check_positive(cls, value: Optional[float], info) -> Optional[float]:
        if value is not None and value <= 0:
            label = "Salary" if info.field_name == "salary" else "Daily rate"
            raise _fail(info.field_name, f"{label} must be positive")
        return value

    @field_validator("joinDate", mode="before")
    @classmethod
    def _check_join_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return datetime.strptime(str(value), "%Y-%m-%d").date()
        except ValueError:
            raise _fail("joinDate", "Join date must be in YYYY-MM-DD format")

    @model_validator(mode="after")
    def _check_rate_matches_type(self) -> "ImportRow":
        if self.type == "FIXED" and not self.salary:
            raise ValueError("Salary is required for FIXED type employees")
        if self.type == "DAILY" and not self.dailyRate:
            raise ValueError("Daily rate is required for DAILY type employees")
        return self

    def to_employee_fields(self) -> dict[str, Any]:
        return {
            "full_name": self.name,
            "mobile": self.mobile,
            "aadhar": self.aadhar,
            "pan": self.pan,
            "address": self.address,
            "employment_type": self.type,
            "monthly_salary": self.salary if self.type == "FIXED" else None,
            "daily_rate": self.dailyRate if self.type == "DAILY" else None,
            "supervisor_id": self.supervisorId,
            "join_date": self.joinDate,
        }


def _cell_text(value: Any) -> Optional[str]:
    """Normalise a raw cell: numbers lose a trailing ``.0``, blanks → None."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (datetime, date)):
        return value
    text = str(value).strip()
    return text or None


def _cell_number(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return value


def normalise_row(raw: dict[str, Any]) -> dict[str, Any]:
    """Map raw cell values onto ``ImportRow`` input."""
    return {
        "name": _cell_text(raw.get("name")) or "",
        "mobile": _cell_text(raw.get("mobile")) or "",
        "aadhar": _cell_text(raw.get("aadhar")),
        "pan": _cell_text(raw.get("pan")),
        "address": _cell_text(raw.get("address")),
        "type": _cell_text(raw.get("type")) or "",
        "salary": _cell_number(raw.get("salary")),
        "dailyRate": _cell_number(raw.get("dailyRate")),
        "supervisorId": _cell_text(raw.get("supervisorId")),
        "joinDate": _cell_text(raw.get("joinDate")) or "",
    }


def validate_row(raw: dict[str, Any]) -> tuple[Optional[ImportRow], list[str]]:
    """Return ``(row, [])`` when valid, else ``(None, messages)``."""
    try:
        return ImportRow.model_validate(normalise_row(raw)), []
    except ValidationError as exc:
        messages = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            msg = err.get("msg", "Invalid value")
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            messages.append(f"{loc}: {msg}" if loc else msg)
        return None, messages


# ═════════════════════════════════════════════════════════════════════
# File parsing
# ═════════════════════════════════════════════════════════════════════


def _xlsx_rows(content: bytes) -> list[dict[str, Any]]:
    workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        keys = [str(h).strip() if h is not None else "" for h in header]
        return [
            dict(zip(keys, values))
            for values in rows
            if values is not None and any(v is not None for v in values)
        ]
    finally:
        # read-only workbooks keep the archive open until closed
        workbook.close()


def _csv_rows(content: bytes) -> Iterator[dict[str, Any]]:
    text = content.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(text))
    for row in reader:
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            continue
        yield {(k or "").strip(): v for k, v in row.items()}


def read_rows(filename: str, content: bytes) -> list[dict[str, Any]]:
    """Parse the uploaded sheet into a list of ``{column: value}`` dicts."""
    name = (filename or "").lower()
    if not name.endswith(SUPPORTED_EXTENSIONS):
        raise ValidationException({"file": [UNSUPPORTED_FORMAT_MESSAGE]})
    try:
        if name.endswith(".csv"):
            rows = list(_csv_rows(content))
        else:
            rows = list(_xlsx_rows(content))
    except (
        UnicodeDecodeError,
        csv.Error,
        zipfile.BadZipFile,
        InvalidFileException,
        OSError,
        KeyError,
        ValueError,
    ) as exc:
        logger.info("Could not parse import file %s: %s", filename, exc)
        raise ValidationException({"file": ["Failed to process the uploaded file."]})
    return rows


# ═════════════════════════════════════════════════════════════════════
# Template
# ═════════════════════════════════════════════════════════════════════


def build_template() -> bytes:
    """``employee_import_template.xlsx`` with the header and two sample rows."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Employees"

    for col_idx, column in enumerate(TEMPLATE_COLUMNS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=column)
        cell.font = Font(bold=True)
        cell.fill = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")
        ws.column_dimensions[get_column_letter(col_idx)].width = max(len(column) + 5, 15)

    for row in TEMPLATE_ROWS:
        ws.append(row)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
