"""
Notification Backends.

- InboxBackend: Notification rows, shown in the user's dropdown and streamed
- ConsoleBackend: Logs to the console (dev)
"""

from .console import ConsoleBackend
from .inbox import InboxBackend

__all__ = [
    "ConsoleBackend",
    "InboxBackend",
]
