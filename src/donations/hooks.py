"""Named hooks wired by the composition root.

The web layer raises named hooks (a webhook arrived, a receipt page was
viewed, an operator asked for a refund); the Paystack integration registers
the callbacks that answer them. Registration happens once, explicitly, in
``PaystackIntegration.setup()``.

A callback can be suspended for the current execution context only, which is
how the webhook receiver keeps a delivery from re-triggering itself without
affecting deliveries handled concurrently on other threads or tasks.
"""

from collections import defaultdict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

PROCESS_WEBHOOK = "process_webhook.paystack"
PROCESS_REFUND = "process_refund.paystack"
CAN_CANCEL = "can_cancel.paystack"
PROCESS_CANCELLATION = "process_cancellation.paystack"
RECEIPT_VIEWED = "donation_receipt_viewed"
RECURRING_PERIODS = "recurring_periods"

_suspended: ContextVar[frozenset[tuple[str, int]]] = ContextVar("suspended_hooks", default=frozenset())


class HookRegistry:
    def __init__(self) -> None:
        self._callbacks: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def add(self, name: str, callback: Callable[..., Any]) -> None:
        if callback not in self._callbacks[name]:
            self._callbacks[name].append(callback)

    def remove(self, name: str, callback: Callable[..., Any]) -> None:
        if callback in self._callbacks[name]:
            self._callbacks[name].remove(callback)

    def has(self, name: str, callback: Callable[..., Any] | None = None) -> bool:
        active = self._active(name)
        if callback is None:
            return bool(active)
        return callback in active

    def _active(self, name: str) -> list[Callable[..., Any]]:
        suspended = _suspended.get()
        return [cb for cb in self._callbacks.get(name, []) if (name, _identity(cb)) not in suspended]

    def fire(self, name: str, *args: Any, **kwargs: Any) -> list[Any]:
        """Invoke every active callback for ``name`` and collect their results."""
        callbacks = self._active(name)
        if not callbacks:
            logger.debug("hook_has_no_callbacks", hook=name)
        return [callback(*args, **kwargs) for callback in callbacks]

    def filter(self, name: str, value: Any, *args: Any) -> Any:
        """Thread ``value`` through every active callback for ``name``."""
        for callback in self._active(name):
            value = callback(value, *args)
        return value

    @contextmanager
    def suspended(self, name: str, callback: Callable[..., Any]) -> Iterator[None]:
        """Disable one callback for the current context until the block exits."""
        token = _suspended.set(_suspended.get() | {(name, _identity(callback))})
        try:
            yield
        finally:
            _suspended.reset(token)


def _identity(callback: Callable[..., Any]) -> int:
    # Bound methods are recreated on every attribute access; key on the
    # underlying function and instance instead.
    owner = getattr(callback, "__self__", None)
    func = getattr(callback, "__func__", callback)
    return hash((id(owner), id(func)))
