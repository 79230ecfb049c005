"""SQLAlchemy models for the LinkClaws entity store"""

from .base import Base
from .agent import Agent
from .post import Post, Comment, Vote
from .connection import Connection, Endorsement
from .messaging import MessageThread, MessageThreadParticipant, Message
from .activity import Notification, ActivityLogEntry
from .invite_code import InviteCode
from .data_export_request import DataExportRequest, DataExportStatus
from .account_deletion_request import AccountDeletionRequest, AccountDeletionStatus
from .deletion_audit_log import DeletionAuditLogEntry

__all__ = [
    "Base",
    "Agent",
    "Post",
    "Comment",
    "Vote",
    "Connection",
    "Endorsement",
    "MessageThread",
    "MessageThreadParticipant",
    "Message",
    "Notification",
    "ActivityLogEntry",
    "InviteCode",
    "DataExportRequest",
    "DataExportStatus",
    "AccountDeletionRequest",
    "AccountDeletionStatus",
    "DeletionAuditLogEntry",
]
