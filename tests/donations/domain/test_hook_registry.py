"""Tests for the named hook registry."""

from donations.hooks import HookRegistry


class _Listener:
    def __init__(self):
        self.calls = []

    def on_event(self, value):
        self.calls.append(value)
        return value * 2


class TestFire:
    def test_fire_collects_results(self):
        hooks = HookRegistry()
        hooks.add("thing", lambda value: value + 1)
        hooks.add("thing", lambda value: value + 2)
        assert hooks.fire("thing", 1) == [2, 3]

    def test_fire_without_callbacks_returns_empty(self):
        assert HookRegistry().fire("nothing") == []

    def test_same_callback_added_once(self):
        hooks = HookRegistry()
        listener = _Listener()
        hooks.add("thing", listener.on_event)
        hooks.add("thing", listener.on_event)
        hooks.fire("thing", 1)
        assert listener.calls == [1]

    def test_remove(self):
        hooks = HookRegistry()
        listener = _Listener()
        hooks.add("thing", listener.on_event)
        hooks.remove("thing", listener.on_event)
        assert not hooks.has("thing")


class TestFilter:
    def test_filter_threads_value(self):
        hooks = HookRegistry()
        hooks.add("periods", lambda periods: {k: v for k, v in periods.items() if k != "quarter"})
        assert hooks.filter("periods", {"month": "Monthly", "quarter": "Quarterly"}) == {"month": "Monthly"}

    def test_filter_passes_extra_arguments(self):
        hooks = HookRegistry()
        hooks.add("can", lambda value, allowed: value and allowed)
        assert hooks.filter("can", True, False) is False

    def test_filter_without_callbacks_returns_value(self):
        assert HookRegistry().filter("nothing", "value") == "value"


class TestSuspended:
    def test_suspended_callback_is_skipped(self):
        hooks = HookRegistry()
        listener = _Listener()
        hooks.add("thing", listener.on_event)
        with hooks.suspended("thing", listener.on_event):
            assert hooks.fire("thing", 1) == []
            assert not hooks.has("thing", listener.on_event)
        assert hooks.fire("thing", 1) == [2]

    def test_suspension_is_restored_on_error(self):
        hooks = HookRegistry()
        listener = _Listener()
        hooks.add("thing", listener.on_event)
        try:
            with hooks.suspended("thing", listener.on_event):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert hooks.has("thing", listener.on_event)

    def test_suspension_is_per_instance_of_bound_method(self):
        hooks = HookRegistry()
        first, second = _Listener(), _Listener()
        hooks.add("thing", first.on_event)
        hooks.add("thing", second.on_event)
        with hooks.suspended("thing", first.on_event):
            hooks.fire("thing", 5)
        assert first.calls == []
        assert second.calls == [5]
