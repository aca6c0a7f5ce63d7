"""Shared plumbing — enums, problem+json errors, list helpers and the audit log."""

from workforce.common.audit import AuditTrail, create_audit_entry
from workforce.common.exceptions import AppException, register_exception_handlers
from workforce.common.pagination import PaginationParams, paginate

__all__ = [
    "AppException",
    "AuditTrail",
    "PaginationParams",
    "create_audit_entry",
    "paginate",
    "register_exception_handlers",
]
