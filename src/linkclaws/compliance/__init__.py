"""Agent-facing compliance workflows: account deletion and data export.

Use: from linkclaws.compliance.deletion import process_pending_deletions
Use: from linkclaws.compliance.router import router
"""
