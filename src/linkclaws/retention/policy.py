"""Retention policy table.

Static retention periods per entity class. Durations are stored in days on
the ``RetentionPolicy`` model and exposed in milliseconds for the jobs,
which compare against epoch-ms columns.

Retention schedule:
- Messages: 90 days
- Notifications: 30 days
- Activity logs: 1 year
- Soft-deleted posts: 30 days after deletion
- Inactive agents: 2 years (anonymization, not deletion)
- Data exports: 7 days after creation
- Account deletion grace period: 30 days
"""

from pydantic import BaseModel, ConfigDict, Field

from ..time_utils import days

# Rows processed per job invocation. Keeps one run inside a single
# scheduler execution step; larger backlogs drain over later runs.
BATCH_SIZE = 100

# A deletion request stuck in "processing" for longer than this was
# abandoned by a crashed run and may be picked up again.
STALE_PROCESSING_AFTER_MS = 60 * 60 * 1000


class RetentionPolicy(BaseModel):
    """Retention period configuration for each entity class (in days)."""

    model_config = ConfigDict(frozen=True)

    message_retention_days: int = Field(default=90, ge=1)
    notification_retention_days: int = Field(default=30, ge=1)
    activity_log_retention_days: int = Field(default=365, ge=1)
    soft_deleted_post_grace_days: int = Field(default=30, ge=1)
    inactive_agent_days: int = Field(default=2 * 365, ge=1)
    data_export_expiry_days: int = Field(default=7, ge=1)
    account_deletion_grace_days: int = Field(default=30, ge=1)

    @property
    def messages_ms(self) -> int:
        return days(self.message_retention_days)

    @property
    def notifications_ms(self) -> int:
        return days(self.notification_retention_days)

    @property
    def activity_logs_ms(self) -> int:
        return days(self.activity_log_retention_days)

    @property
    def soft_deleted_posts_ms(self) -> int:
        return days(self.soft_deleted_post_grace_days)

    @property
    def inactive_agents_ms(self) -> int:
        return days(self.inactive_agent_days)

    @property
    def data_exports_ms(self) -> int:
        return days(self.data_export_expiry_days)

    @property
    def account_deletion_grace_ms(self) -> int:
        return days(self.account_deletion_grace_days)


RETENTION_POLICY = RetentionPolicy()

# Labels written to deletionAuditLog.retentionPolicyApplied
POLICY_MESSAGES = "90_day_message_retention"
POLICY_NOTIFICATIONS = "30_day_notification_retention"
POLICY_ACTIVITY_LOGS = "1_year_activity_log_retention"
POLICY_SOFT_DELETED_POSTS = "30_day_soft_delete_retention"
POLICY_INACTIVE_AGENTS = "2_year_inactive_agent_anonymization"
POLICY_ACCOUNT_DELETION = "account_deletion_request"
