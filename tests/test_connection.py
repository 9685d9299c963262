"""Tests for the connection state machine."""

import pytest

from voice_studio.client.connection import (
    ConnectionState,
    ConnectionStateMachine,
    InvalidTransitionError,
)


@pytest.fixture
def machine():
    return ConnectionStateMachine()


def connected(machine) -> ConnectionStateMachine:
    machine.fire("connect")
    machine.fire("connected")
    return machine


class TestTransitions:
    def test_connect_flow(self, machine):
        assert machine.fire("connect") == ConnectionState.CONNECTING
        assert machine.fire("connected") == ConnectionState.CONNECTED_IDLE
        assert machine.is_connected

    def test_connect_failure(self, machine):
        machine.fire("connect")
        assert machine.fire("connect_failed") == ConnectionState.DISCONNECTED

    def test_publishing_toggle(self, machine):
        connected(machine)
        assert machine.fire("start_publishing") == ConnectionState.CONNECTED_PUBLISHING
        assert machine.is_publishing
        assert machine.fire("stop_publishing") == ConnectionState.CONNECTED_IDLE

    def test_reconnect_restores_publishing(self, machine):
        connected(machine)
        machine.fire("start_publishing")

        assert machine.fire("connection_lost") == ConnectionState.RECONNECTING
        assert not machine.is_connected
        assert machine.fire("reconnected") == ConnectionState.CONNECTED_PUBLISHING

    def test_reconnect_restores_idle(self, machine):
        connected(machine)
        machine.fire("connection_lost")
        assert machine.fire("reconnected") == ConnectionState.CONNECTED_IDLE

    def test_disconnect_while_reconnecting(self, machine):
        connected(machine)
        machine.fire("connection_lost")
        assert machine.fire("disconnect") == ConnectionState.DISCONNECTED


class TestIllegalTransitions:
    @pytest.mark.parametrize(
        "event", ["connected", "start_publishing", "connection_lost", "reconnected", "disconnect"]
    )
    def test_from_disconnected(self, machine, event):
        with pytest.raises(InvalidTransitionError):
            machine.fire(event)
        assert machine.state == ConnectionState.DISCONNECTED

    def test_connect_twice(self, machine):
        machine.fire("connect")
        with pytest.raises(InvalidTransitionError):
            machine.fire("connect")

    def test_publish_while_reconnecting(self, machine):
        connected(machine)
        machine.fire("connection_lost")
        with pytest.raises(InvalidTransitionError) as exc_info:
            machine.fire("start_publishing")
        assert exc_info.value.state == ConnectionState.RECONNECTING

    def test_unknown_event(self, machine):
        with pytest.raises(InvalidTransitionError):
            machine.fire("teleport")


def test_listeners_notified(machine):
    changes = []
    machine.on_change(lambda previous, current: changes.append((previous, current)))

    connected(machine)

    assert changes == [
        (ConnectionState.DISCONNECTED, ConnectionState.CONNECTING),
        (ConnectionState.CONNECTING, ConnectionState.CONNECTED_IDLE),
    ]


def test_can(machine):
    assert machine.can("connect")
    assert not machine.can("reconnected")
