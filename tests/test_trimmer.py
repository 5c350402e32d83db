"""Tests for shutdown trimming."""

from __future__ import annotations

import pytest

from operations import ShutdownTrimmer


class TestShutdownTrimmer:
    """Test removal of already-synced operations before shutdown."""

    @pytest.fixture
    def trimmer(self, settings, host) -> ShutdownTrimmer:
        return ShutdownTrimmer(settings, host)

    @pytest.fixture
    def populated(self, settings, host, make_op):
        """Hook list [H1, H2, H3] with H1, H3 candidates and H2 a sync hook."""
        for name in ("H1", "H2", "H3"):
            host.shutdown_hooks.add(make_op(name))
        settings.shutdown_hook_candidates = ["H1", "H3"]
        settings.sync_hooks = ["H2"]

    def test_trims_hook_candidates_and_sync_hooks(self, trimmer, host, populated):
        """Every hook covered by a candidate or sync hook is removed."""
        removed = trimmer.trim_before_shutdown()

        assert host.shutdown_hooks.names() == []
        assert removed == ["H1", "H2", "H3"]

    def test_disabled_flag_is_a_no_op(self, trimmer, settings, host, populated):
        """Without faster shutdown the lists are untouched."""
        settings.faster_shutdown = False

        assert trimmer.trim_before_shutdown() == []
        assert host.shutdown_hooks.names() == ["H1", "H2", "H3"]

    def test_trims_queries_by_query_candidates_only(self, trimmer, settings, host, make_op):
        """Query trimming ignores the sync hooks."""
        for name in ("Q1", "Q2", "S1"):
            host.shutdown_queries.add(make_op(name))
        settings.shutdown_query_candidates = ["Q1"]
        settings.sync_hooks = ["S1"]

        trimmer.trim_before_shutdown()

        assert host.shutdown_queries.names() == ["Q2", "S1"]

    def test_is_idempotent(self, trimmer, host, make_op, settings):
        """Trimming twice leaves the same result."""
        host.shutdown_hooks.add(make_op("H1"))
        host.shutdown_hooks.add(make_op("keep"))
        settings.shutdown_hook_candidates = ["H1"]

        trimmer.trim_before_shutdown()
        second = trimmer.trim_before_shutdown()

        assert second == []
        assert host.shutdown_hooks.names() == ["keep"]

    def test_anonymous_hooks_are_kept(self, trimmer, host, settings):
        """Anonymous hooks cannot be candidates, so they stay."""
        host.shutdown_hooks.add(lambda: None)
        settings.shutdown_hook_candidates = ["<anonymous>"]

        trimmer.trim_before_shutdown()

        assert len(host.shutdown_hooks) == 1

    def test_runs_as_part_of_host_shutdown(self, sync_mode, host, make_op, calls, settings):
        """Enabled mode trims before the host runs its hooks."""
        host.shutdown_hooks.add(make_op("H1"))
        host.shutdown_hooks.add(make_op("other"))
        settings.shutdown_hook_candidates = ["H1"]
        sync_mode.enable()

        host.run_shutdown()

        assert calls == ["other"]

    def test_not_installed_after_disable(self, sync_mode, host, make_op, calls, settings):
        """A disabled mode leaves the shutdown hooks alone."""
        host.shutdown_hooks.add(make_op("H1"))
        settings.shutdown_hook_candidates = ["H1"]
        sync_mode.enable()
        sync_mode.disable()

        host.run_shutdown()

        assert calls == ["H1"]
