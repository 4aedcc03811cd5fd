"""
Tests for the Debouncer utility.
"""

from unittest.mock import Mock

from trapselect.infrastructure.scheduling.debouncer import Debouncer


class TestDebouncer:
    """Tests for Debouncer over a virtual clock."""

    def test_only_last_call_runs(self, clock):
        func = Mock()
        debouncer = Debouncer(clock, delay_ms=300)
        debouncer.call(func, 1)
        clock.advance(200)
        debouncer.call(func, 2)
        clock.advance(299)
        func.assert_not_called()
        clock.advance(1)
        func.assert_called_once_with(2)
        assert not debouncer.is_pending()

    def test_kwargs(self, clock):
        func = Mock()
        debouncer = Debouncer(clock)
        debouncer.call(func, key='value')
        clock.advance(500)
        func.assert_called_once_with(key='value')

    def test_cancel(self, clock):
        func = Mock()
        debouncer = Debouncer(clock)
        debouncer.call(func)
        debouncer.cancel()
        assert not debouncer.is_pending()
        clock.run_until_idle()
        func.assert_not_called()

    def test_flush(self, clock):
        func = Mock()
        debouncer = Debouncer(clock)
        debouncer.call(func, 'now')
        debouncer.flush()
        func.assert_called_once_with('now')
        assert clock.pending_count() == 0

    def test_flush_without_pending(self, clock):
        debouncer = Debouncer(clock)
        debouncer.flush()
        assert not debouncer.is_pending()

    def test_negative_delay_clamped(self, clock):
        debouncer = Debouncer(clock, delay_ms=-10)
        assert debouncer.delay_ms == 0
        debouncer.delay_ms = -1
        assert debouncer.delay_ms == 0

    def test_callback_may_reschedule(self, clock):
        calls = []
        debouncer = Debouncer(clock, delay_ms=100)

        def again():
            calls.append(clock.now_ms)
            if len(calls) < 2:
                debouncer.call(again)

        debouncer.call(again)
        clock.run_until_idle()
        assert calls == [100, 200]
