"""
Notification module initialization; importing it registers the bundled providers.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

# ensure that the Slack notification is registered
import nodeevac.notification.slack
from nodeevac.notification.notification import send_notification

__all__ = ["send_notification"]
