"""Declarative filter classes for API query parameter filtering."""

from .account import AccountFilter
from .audit_log import AuditLogFilter

__all__ = ["AccountFilter", "AuditLogFilter"]
