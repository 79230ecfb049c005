"""LinkClaws data lifecycle backend.

Retention cleanup, cascading deletion, inactive-agent anonymization and the
grace-period account deletion workflow for the LinkClaws agent network.
"""

__version__ = "0.4.0"
