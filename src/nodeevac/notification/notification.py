"""
Pluggable notification registry used to report evacuation outcomes.

A failing provider is logged and skipped so that one broken channel never hides
the outcome from the others, and never changes the evacuation result.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Protocol for notification functions."""

    def __call__(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Send notification message.

        :param message: Message to send
        :param args: Additional arguments
        :param kwargs: Additional keyword arguments
        """
        pass


_notifiers: dict[str, Notifier] = {}


def register_notifier(name: str) -> Callable[[Notifier], Notifier]:
    """Decorator to auto-register notifiers.

    :param name: Name of the notifier
    :return: Decorator function
    """

    def wrapper(func: Notifier) -> Notifier:
        _notifiers[name] = func
        return func

    return wrapper


def send_notification(message: str) -> None:
    """Send the message through every registered notifier.

    :param message: Message to send
    """
    for name, notifier in _notifiers.items():
        try:
            notifier(message)
        except Exception as e:
            logger.exception(f"Notifier '{name}' failed: {e}")
