"""
Tests for the Debounce Gate.

Requires Python 3.11+.
"""

import time

from impmon.watcher.debouncer import DebounceGate


def wait_until(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestDebounceGate:
    """Test cases for DebounceGate."""

    def test_first_signal_accepted(self):
        gate = DebounceGate(lambda: 500)

        assert gate.accept("/app/a.py")
        assert gate.pending("/app/a.py")

    def test_signal_within_cooldown_dropped(self):
        gate = DebounceGate(lambda: 500)

        assert gate.accept("/app/a.py")
        assert not gate.accept("/app/a.py")
        assert not gate.accept("/app/a.py")

    def test_paths_are_independent(self):
        gate = DebounceGate(lambda: 500)

        assert gate.accept("/app/a.py")
        assert gate.accept("/app/b.py")
        assert gate.pending_count == 2

    def test_entry_expires_after_cooldown(self):
        gate = DebounceGate(lambda: 50)

        assert gate.accept("/app/a.py")
        assert wait_until(lambda: not gate.pending("/app/a.py"))
        assert gate.accept("/app/a.py")

    def test_cooldown_read_when_accepting(self):
        timeout = {"ms": 10_000}
        gate = DebounceGate(lambda: timeout["ms"])

        gate.accept("/app/a.py")
        timeout["ms"] = 20
        gate.accept("/app/b.py")

        assert wait_until(lambda: not gate.pending("/app/b.py"))
        assert gate.pending("/app/a.py")

    def test_clear_drops_entries(self):
        gate = DebounceGate(lambda: 10_000)
        gate.accept("/app/a.py")
        gate.clear()

        assert gate.pending_count == 0
        assert gate.accept("/app/a.py")

    def test_stale_timer_does_not_end_newer_cooldown(self):
        cooldown = {"ms": 50}
        gate = DebounceGate(lambda: cooldown["ms"])
        gate.accept("/app/a.py")
        gate.clear()

        cooldown["ms"] = 10_000
        gate.accept("/app/a.py")
        time.sleep(0.2)

        assert gate.pending("/app/a.py")
