# =============================================================================
# tests/test_observable.py - StateContainer Tests
# =============================================================================

from core.models.session import AuthSnapshot, AuthStatus
from lib.observable import StateContainer


class TestStateContainer:
    """Tests for subscribe/update/broadcast."""

    def test_subscribe_emits_current(self):
        container = StateContainer(AuthSnapshot())
        seen = []

        container.subscribe(seen.append)

        assert seen == [AuthSnapshot()]

    def test_subscribe_without_initial_emit(self):
        container = StateContainer(AuthSnapshot())
        seen = []

        container.subscribe(seen.append, emit_current=False)

        assert seen == []

    def test_update_publishes_new_snapshot(self):
        """Old snapshots are never mutated."""
        container = StateContainer(AuthSnapshot())
        before = container.snapshot
        seen = []
        container.subscribe(seen.append, emit_current=False)

        after = container.update(status=AuthStatus.LOGGED_IN)

        assert before.status is AuthStatus.LOGGED_OUT
        assert after.status is AuthStatus.LOGGED_IN
        assert container.snapshot is after
        assert seen == [after]

    def test_unsubscribe(self):
        container = StateContainer(AuthSnapshot())
        seen = []
        unsubscribe = container.subscribe(seen.append, emit_current=False)

        unsubscribe()
        unsubscribe()
        container.update(error_message="x")

        assert seen == []

    def test_failing_subscriber_is_dropped(self):
        container = StateContainer(AuthSnapshot())
        calls = []
        seen = []

        def broken(snapshot):
            calls.append(snapshot)
            raise RuntimeError("render failed")

        container.subscribe(broken, emit_current=False)
        container.subscribe(seen.append, emit_current=False)

        container.update(error_message="first")
        container.update(error_message="second")

        assert len(calls) == 1
        assert [s.error_message for s in seen] == ["first", "second"]

    def test_failing_on_initial_emit(self):
        container = StateContainer(AuthSnapshot())
        calls = []

        def broken(snapshot):
            calls.append(snapshot)
            raise ValueError("boom")

        container.subscribe(broken)
        container.update(error_message="x")

        assert len(calls) == 1
