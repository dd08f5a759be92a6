"""Unit tests for the signal registry."""

import json
import pytest
from dataclasses import FrozenInstanceError

from relay.config import Config
from relay.signals import DEFAULT_SIGNALS, Signal, SignalRegistry, build_registry


class TestSignalRegistry:
    """Test registry construction and lookup."""

    def test_default_catalog(self, registry):
        assert registry.names() == ["notify-cascade", "notify-replit"]
        cascade = registry.get("notify-cascade")
        assert cascade.source_agent == "Cascade"
        assert cascade.target_agent == "Replit"

    def test_preserves_order(self):
        signals = [
            Signal("b", "B", "A"),
            Signal("a", "A", "B"),
        ]
        registry = SignalRegistry(signals)
        assert [s.name for s in registry] == ["b", "a"]
        assert len(registry) == 2

    def test_membership(self, registry):
        assert "notify-replit" in registry
        assert "notify-nobody" not in registry
        assert registry.get("notify-nobody") is None

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            SignalRegistry([Signal("x", "A", "B"), Signal("x", "B", "A")])

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            SignalRegistry([])

    def test_signals_are_immutable(self):
        with pytest.raises(FrozenInstanceError):
            DEFAULT_SIGNALS[0].name = "changed"

    def test_registry_is_a_snapshot(self):
        source = [Signal("x", "A", "B")]
        registry = SignalRegistry(source)
        source.append(Signal("y", "B", "A"))
        assert registry.names() == ["x"]


class TestBuildRegistry:
    """Test building the registry from configuration."""

    def test_defaults_without_config(self):
        assert build_registry().signals == DEFAULT_SIGNALS

    def test_defaults_without_override(self, clean_env):
        assert build_registry(Config(_env_file=None)).signals == DEFAULT_SIGNALS

    def test_override_from_json(self, clean_env):
        config = Config(
            _env_file=None,
            signals_json=json.dumps([{"name": "notify-ops", "source_agent": "Ops", "target_agent": "Dev"}]),
        )
        registry = build_registry(config)
        assert registry.names() == ["notify-ops"]
        assert registry.get("notify-ops") == Signal("notify-ops", "Ops", "Dev")
