"""
Bulk role import from an uploaded CSV file.

Expected columns (matched loosely, any order): ชื่อ, อีเมล, รหัสผ่าน, สถานะ.
Every valid row becomes a pending, unapproved role assignment under a freshly
generated user id. Bad rows are reported and skipped; they never abort the file.
"""
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from fastapi import HTTPException
from supabase import Client

from school_portal.config.access_config import CSV_STATUS_ROLES, Role
from school_portal.modules.admin.schemas import CsvImportResponse, ImportRowError

logger = logging.getLogger(__name__)

NAME, EMAIL, PASSWORD, STATUS = "ชื่อ", "อีเมล", "รหัสผ่าน", "สถานะ"
EXPECTED_HEADERS: Tuple[str, ...] = (NAME, EMAIL, PASSWORD, STATUS)
MIN_FIELDS = len(EXPECTED_HEADERS)

INCOMPLETE_ROW = "ข้อมูลไม่ครบ"
INVALID_EMAIL = "อีเมลไม่ถูกต้อง"
INVALID_STATUS = "สถานะไม่ถูกต้อง"
INSERT_FAILED = "บันทึกข้อมูลไม่สำเร็จ"


@dataclass(frozen=True)
class ImportRow:
    row: int
    name: str
    email: str
    password: str
    role: Role


def split_csv_line(line: str) -> List[str]:
    """Split on commas outside double quotes. Quotes are dropped; "" is not an escape."""
    fields = []
    current = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def _normalize(text: str) -> str:
    return re.sub(r"\s+", "", text).lower()


def match_headers(actual: Sequence[str]) -> Tuple[Dict[str, int], List[str]]:
    """
    Map each expected header to a column index. A column matches when either
    normalised text contains the other. Returns (columns, missing headers).
    """
    normalized = [_normalize(header) for header in actual]
    columns: Dict[str, int] = {}
    missing: List[str] = []
    for expected in EXPECTED_HEADERS:
        target = _normalize(expected)
        for index, header in enumerate(normalized):
            if header and (target in header or header in target):
                columns[expected] = index
                break
        else:
            missing.append(expected)
    return columns, missing


def parse_rows(lines: Sequence[str], columns: Dict[str, int]) -> Tuple[List[ImportRow], List[ImportRowError]]:
    """Validate data lines (numbered from 1, header excluded)"""
    rows: List[ImportRow] = []
    errors: List[ImportRowError] = []
    width = max(MIN_FIELDS, max(columns.values()) + 1)
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        fields = split_csv_line(line)
        if len(fields) < width:
            errors.append(ImportRowError(row=number, message=INCOMPLETE_ROW))
            continue
        email = fields[columns[EMAIL]]
        if "@" not in email:
            errors.append(ImportRowError(row=number, message=INVALID_EMAIL, value=email))
            continue
        status = fields[columns[STATUS]]
        role = CSV_STATUS_ROLES.get(status)
        if role is None:
            errors.append(ImportRowError(row=number, message=INVALID_STATUS, value=status))
            continue
        rows.append(ImportRow(
            row=number,
            name=fields[columns[NAME]],
            email=email,
            password=fields[columns[PASSWORD]],
            role=role,
        ))
    return rows, errors


class CsvRoleImporter:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def run(self, text: str) -> CsvImportResponse:
        lines = text.splitlines()
        while lines and not lines[0].strip():
            lines.pop(0)
        if not lines:
            raise HTTPException(status_code=400, detail="ไฟล์ CSV ว่างเปล่า")

        columns, missing = match_headers(split_csv_line(lines[0]))
        if missing:
            raise HTTPException(
                status_code=400,
                detail=f"หัวตารางไม่ถูกต้อง ต้องมีคอลัมน์: {', '.join(missing)}"
            )

        rows, errors = parse_rows(lines[1:], columns)
        success_count = 0
        # One insert at a time, in file order
        for row in rows:
            try:
                self.supabase.table("user_roles").insert({
                    "user_id": str(uuid.uuid4()),
                    "role": row.role.value,
                    "email": row.email,
                    "approved": False,
                    "pending_approval": True
                }).execute()
                success_count += 1
            except Exception as e:
                logger.error(f"CSV import row {row.row} ({row.email}) failed: {e}")
                errors.append(ImportRowError(row=row.row, message=INSERT_FAILED, value=row.email))

        errors.sort(key=lambda error: error.row)
        logger.info(f"CSV role import finished: {success_count} imported, {len(errors)} errors")
        return CsvImportResponse(
            success_count=success_count,
            errors=errors,
            message=f"นำเข้าสำเร็จ {success_count} รายการ, ผิดพลาด {len(errors)} รายการ"
        )
