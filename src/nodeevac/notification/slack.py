"""
Slack webhook notification provider for per-node evacuation summaries.

A batch posts one message per node in quick succession, so rate-limited posts
(HTTP 429) are retried by the session adapter, honouring Retry-After.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""
import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from nodeevac.notification.notification import register_notifier
from nodeevac.settings import SLACK_WEBHOOK_URL

logger = logging.getLogger(__name__)

SLACK_TIMEOUT_SECONDS = 10


def _create_session() -> requests.Session:
    """Create a session that retries rate-limited webhook posts."""
    session = requests.Session()
    retry_strategy = Retry(
        total=3,
        backoff_factor=1,
        status_forcelist=[429],
        allowed_methods=frozenset({"POST"}),
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


@register_notifier("slack")
def send_slack_notification(message: str, slack_webhook_url: str = None) -> None:
    """Post an evacuation summary to Slack via incoming webhook.

    Skipped (at debug level) when no webhook is configured. Delivery failures are
    logged and never raised.

    :param message: Message to send, Slack mrkdwn formatted
    :param slack_webhook_url: Slack webhook URL (optional)
    """
    webhook_url = SLACK_WEBHOOK_URL if slack_webhook_url is None else slack_webhook_url

    if not webhook_url:
        logger.debug("No Slack webhook configured, skipping notification")
        return

    try:
        with _create_session() as session:
            response = session.post(
                webhook_url, json={"text": message}, timeout=SLACK_TIMEOUT_SECONDS
            )
            response.raise_for_status()
        logger.info(f"Slack notification sent. Response: {response.status_code}")
    except requests.RequestException as e:
        logger.exception(f"Failed to send Slack notification: {e}")
