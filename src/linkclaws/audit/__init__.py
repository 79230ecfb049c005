"""Append-only deletion audit log."""

from .service import log_deletion_event, query_deletion_audit_log

__all__ = ["log_deletion_event", "query_deletion_audit_log"]
