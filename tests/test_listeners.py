"""Tests for the listener registry."""

import logging
from unittest.mock import Mock

import pytest

from custom_components.daikin_one.listeners import ListenerRegistry

DEVICE_ID = "device1"


class TestListenerRegistry:
    """Tests for ListenerRegistry."""

    def test_notify_calls_callbacks_for_device_only(self) -> None:
        """Test that notify reaches only the device's own callbacks."""
        registry = ListenerRegistry()
        mine = Mock()
        other = Mock()
        registry.subscribe(DEVICE_ID, mine)
        registry.subscribe("device2", other)

        registry.notify(DEVICE_ID)

        mine.assert_called_once_with()
        other.assert_not_called()

    def test_subscribe_ignores_duplicates(self) -> None:
        """Test that a callback registered twice is called once."""
        registry = ListenerRegistry()
        callback = Mock()
        registry.subscribe(DEVICE_ID, callback)
        registry.subscribe(DEVICE_ID, callback)
        assert registry.count(DEVICE_ID) == 1

    def test_unregister_removes_callback(self) -> None:
        """Test that the returned function removes the callback."""
        registry = ListenerRegistry()
        callback = Mock()
        unregister = registry.subscribe(DEVICE_ID, callback)

        unregister()
        registry.notify(DEVICE_ID)

        callback.assert_not_called()
        assert registry.count(DEVICE_ID) == 0

    def test_unsubscribe_unknown_callback_is_ignored(self) -> None:
        """Test that removing something never registered does nothing."""
        registry = ListenerRegistry()
        registry.unsubscribe(DEVICE_ID, Mock())
        assert registry.count(DEVICE_ID) == 0

    def test_failing_callback_does_not_stop_others(
        self,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that a raising callback is logged and the rest still run."""
        registry = ListenerRegistry()
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        registry.subscribe(DEVICE_ID, failing)
        registry.subscribe(DEVICE_ID, healthy)

        with caplog.at_level(logging.ERROR):
            registry.notify(DEVICE_ID)

        healthy.assert_called_once()
        assert "Error in listener for device device1" in caplog.text

    def test_callback_may_unregister_itself_during_notify(self) -> None:
        """Test that unregistering inside a callback is safe."""
        registry = ListenerRegistry()
        later = Mock()
        unregister_self = None

        def once() -> None:
            unregister_self()

        unregister_self = registry.subscribe(DEVICE_ID, once)
        registry.subscribe(DEVICE_ID, later)

        registry.notify(DEVICE_ID)

        later.assert_called_once()
        assert registry.count(DEVICE_ID) == 1
