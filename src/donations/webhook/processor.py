"""Common contract for webhook processors.

A processor knows how to find the record an event refers to, how to tell
whether the event's transition has already been applied to it, and how to
apply it. The dispatcher owns the guard around those steps.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from donations.webhook.classification import InterpretedEvent


@dataclass(frozen=True)
class ProcessResult:
    completed: bool
    message: str


class WebhookProcessor(ABC):
    not_found_message: str = "Record not found"

    @abstractmethod
    def locate(self, event: InterpretedEvent) -> Any | None:
        """Find the local record targeted by the event, or None."""

    @abstractmethod
    def guard_key(self, record: Any) -> str:
        """Key under which mutations of ``record`` are serialized."""

    @abstractmethod
    def reload(self, record: Any) -> Any:
        """Fetch a fresh copy of ``record`` once the guard is held."""

    @abstractmethod
    def is_applied(self, record: Any, event: InterpretedEvent) -> bool:
        """True when the event's transition is already reflected on the record."""

    @abstractmethod
    def process(self, event: InterpretedEvent, record: Any) -> ProcessResult:
        """Apply the event's transition to the record."""
