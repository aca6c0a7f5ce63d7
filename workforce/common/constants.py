"""Enums and constants for the workforce service — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Employee ────────────────────────────────────────────────────────

class EmploymentType(str, enum.Enum):
    fixed = "FIXED"
    daily = "DAILY"


class EmployeeStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    owner = "OWNER"
    supervisor = "SUPERVISOR"
    admin = "ADMIN"


class SupervisorStatus(str, enum.Enum):
    active = "ACTIVE"
    inactive = "INACTIVE"


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    present = "P"
    absent = "A"


ATTENDANCE_STATUS_LABELS: dict[AttendanceStatus, str] = {
    AttendanceStatus.present: "Present",
    AttendanceStatus.absent: "Absent",
}


# ── Company / Subscription ──────────────────────────────────────────

class SubscriptionStatus(str, enum.Enum):
    active = "active"
    expired = "expired"


# ── Role-based permissions ──────────────────────────────────────────

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.owner: [
        "company:read",
        "company:update",
        "supervisor:manage",
        "employee:read",
        "employee:write",
        "employee:import",
        "attendance:read",
        "attendance:mark",
        "report:read",
        "report:finalize",
        "dashboard:read",
    ],
    UserRole.supervisor: [
        "company:read",
        "employee:read",
        "employee:write",
        "employee:import",
        "attendance:read",
        "attendance:mark",
        "report:read",
        "dashboard:read",
    ],
    UserRole.admin: [
        "platform:companies",
        "platform:subscriptions",
    ],
}

# ── Misc constants ──────────────────────────────────────────────────

DATE_FORMAT = "%d-%b-%Y"          # Indian format: 19-Feb-2026
TIME_FORMAT = "%H:%M"
TIMEZONE = "Asia/Kolkata"
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
