"""Tests for CircuitBreaker."""

from datetime import datetime, timedelta, timezone

from src.guardrails.circuit_breaker import CircuitBreaker, CircuitBreakerTrigger

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class TestShouldTrigger:
    """Tests for CircuitBreaker.should_trigger."""

    def test_no_trigger_within_limits(self):
        breaker = CircuitBreaker()
        breaker.update_daily_pnl(-5.0)

        assert breaker.should_trigger() is None

    def test_daily_loss_beyond_threshold(self):
        breaker = CircuitBreaker(daily_loss_threshold=-10.0)
        breaker.update_daily_pnl(-12.0)

        assert breaker.should_trigger() == CircuitBreakerTrigger.DAILY_LOSS_THRESHOLD

    def test_daily_loss_at_threshold_triggers(self):
        breaker = CircuitBreaker(daily_loss_threshold=-10.0)
        breaker.update_daily_pnl(-10.0)

        assert breaker.should_trigger() == CircuitBreakerTrigger.DAILY_LOSS_THRESHOLD

    def test_consecutive_losses(self):
        breaker = CircuitBreaker(consecutive_loss_limit=3)
        for _ in range(3):
            breaker.record_loss()

        assert breaker.should_trigger() == CircuitBreakerTrigger.CONSECUTIVE_LOSSES

    def test_daily_loss_checked_first(self):
        breaker = CircuitBreaker(consecutive_loss_limit=1)
        breaker.record_loss()
        breaker.update_daily_pnl(-15.0)

        assert breaker.should_trigger() == CircuitBreakerTrigger.DAILY_LOSS_THRESHOLD

    def test_win_resets_loss_streak(self):
        breaker = CircuitBreaker(consecutive_loss_limit=2)
        breaker.record_loss()
        breaker.record_win()
        breaker.record_loss()

        assert breaker.consecutive_losses == 1
        assert breaker.should_trigger() is None


class TestTriggerAndResume:
    """Tests for trigger, can_resume and reset."""

    def test_trigger_sets_resume_time(self):
        breaker = CircuitBreaker()
        breaker.trigger(2.0, NOW)

        assert breaker.triggered is True
        assert breaker.resume_at == NOW + timedelta(hours=2)

    def test_can_resume_when_not_triggered(self):
        assert CircuitBreaker().can_resume(NOW) is True

    def test_cannot_resume_during_pause(self):
        breaker = CircuitBreaker()
        breaker.trigger(1.0, NOW)

        assert breaker.can_resume(NOW + timedelta(minutes=59)) is False

    def test_can_resume_once_pause_elapsed(self):
        breaker = CircuitBreaker()
        breaker.trigger(1.0, NOW)

        assert breaker.can_resume(NOW + timedelta(hours=1)) is True
        # Elapsed time alone does not re-arm
        assert breaker.triggered is True

    def test_reset(self):
        breaker = CircuitBreaker()
        breaker.record_loss()
        breaker.trigger(1.0, NOW)

        breaker.reset()

        assert breaker.triggered is False
        assert breaker.resume_at is None
        assert breaker.consecutive_losses == 0


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_round_trip_preserves_pause(self):
        breaker = CircuitBreaker(daily_loss_threshold=-8.0, consecutive_loss_limit=4)
        breaker.record_loss()
        breaker.update_daily_pnl(-9.5)
        breaker.trigger(1.0, NOW)

        restored = CircuitBreaker.from_dict(breaker.to_dict())

        assert restored == breaker
