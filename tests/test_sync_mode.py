"""Tests for the sync mode lifecycle."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from scheduler import CoordinatorState, SyncMode
from scheduler.timers import TimerKind


class TestSyncModeLifecycle:
    """Test enabling and disabling the mode."""

    def test_enable_arms_timers(self, sync_mode: SyncMode):
        """Enabling reconciles once."""
        sync_mode.enable()

        assert sync_mode.enabled
        assert sync_mode.coordinator.state is CoordinatorState.PERIODIC_WAITING

    def test_enable_twice_is_harmless(self, sync_mode: SyncMode, fake_backend):
        """A second enable does not create more timers."""
        sync_mode.enable()
        sync_mode.enable()

        assert len(fake_backend.created) == 1

    def test_disable_cancels_both_timers(self, sync_mode: SyncMode, fake_backend):
        """Disabling leaves no timer armed."""
        sync_mode.enable()
        fake_backend.advance(5)
        fake_backend.record_activity()
        fake_backend.advance(55)  # tick arms the one-shot

        sync_mode.disable()

        assert not sync_mode.enabled
        assert fake_backend.timers == []
        assert sync_mode.coordinator.state is CoordinatorState.DISABLED

    def test_reenable_rebuilds_timers(self, sync_mode: SyncMode, fake_backend):
        """Timer state is rebuilt on every enable."""
        sync_mode.enable()
        first = sync_mode.coordinator.periodic_timer
        sync_mode.disable()
        sync_mode.enable()

        assert sync_mode.coordinator.periodic_timer is not first
        assert len(fake_backend.active(TimerKind.PERIODIC)) == 1

    def test_syncs_after_idle(self, sync_mode: SyncMode, settings, registry, fake_backend, calls, make_op):
        """End to end: an idle user gets their operations synced."""
        registry.register(make_op("save_history"))
        settings.sync_hooks = ["save_history"]
        settings.periodic_delay = 0
        sync_mode.enable()

        fake_backend.advance(10)

        assert calls == ["save_history"]
        assert sync_mode.executor.pass_count == 1

    def test_host_hooks_synced_when_candidates(
        self, sync_mode: SyncMode, settings, host, fake_backend, calls, make_op
    ):
        """Shutdown hooks named as candidates run on every pass."""
        host.shutdown_hooks.add(make_op("recentf_save"))
        host.shutdown_hooks.add(make_op("unrelated"))
        settings.shutdown_hook_candidates = ["recentf_save"]
        settings.periodic_delay = 0
        sync_mode.enable()

        fake_backend.advance(10)
        fake_backend.record_activity()
        fake_backend.advance(10)

        assert calls == ["recentf_save", "recentf_save"]

    def test_disable_does_not_interrupt_running_pass(
        self, sync_mode: SyncMode, settings, registry, calls
    ):
        """Disabling from inside a pass lets the pass finish."""

        def disable_mode():
            sync_mode.disable()
            calls.append("disabled")

        def after():
            calls.append("after")

        registry.register(disable_mode)
        registry.register(after)
        settings.sync_hooks = ["disable_mode", "after"]
        sync_mode.enable()

        sync_mode.run_pass()

        assert calls == ["disabled", "after"]
        assert not sync_mode.enabled

    def test_shutdown_stops_backend(self, sync_mode: SyncMode, fake_backend):
        """Shutdown disables the mode."""
        sync_mode.enable()

        sync_mode.shutdown()

        assert not sync_mode.enabled
        assert fake_backend.timers == []


class TestSyncModeSettings:
    """Test settings updates through the mode."""

    def test_update_settings(self, sync_mode: SyncMode):
        """Valid changes are applied together."""
        sync_mode.update_settings(idle_delay=5, faster_shutdown=False)

        assert sync_mode.settings.idle_delay == 5
        assert sync_mode.settings.faster_shutdown is False

    def test_invalid_update_applies_nothing(self, sync_mode: SyncMode):
        """One invalid value rejects the whole update."""
        with pytest.raises(ValidationError):
            sync_mode.update_settings(idle_delay=5, periodic_delay=-1)

        assert sync_mode.settings.idle_delay == 10
        assert sync_mode.settings.periodic_delay == 60

    def test_unknown_setting_rejected(self, sync_mode: SyncMode):
        """Unknown names are an error."""
        with pytest.raises(ValueError, match="Unknown sync settings"):
            sync_mode.update_settings(idle_dealy=5)

    def test_update_applies_on_next_tick(self, sync_mode: SyncMode, fake_backend):
        """A delay change reshapes the timers at the next tick."""
        sync_mode.enable()
        sync_mode.update_settings(idle_delay=120)

        assert sync_mode.coordinator.periodic_timer is not None
        fake_backend.advance(60)
        assert sync_mode.coordinator.periodic_timer is None
        assert sync_mode.coordinator.state is CoordinatorState.IDLE_ONLY

    def test_status(self, sync_mode: SyncMode):
        """Status summarizes the mode."""
        sync_mode.enable()
        sync_mode.run_pass()

        status = sync_mode.status()

        assert status["enabled"] is True
        assert status["state"] == "periodic_waiting"
        assert status["pass_count"] == 1
        assert status["last_pass"]["failed"] == 0
