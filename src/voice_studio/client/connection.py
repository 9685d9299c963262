"""Realtime connection state machine for the test client."""

import logging
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED_IDLE = "connected-idle"
    CONNECTED_PUBLISHING = "connected-publishing"
    RECONNECTING = "reconnecting"


CONNECTED_STATES = {ConnectionState.CONNECTED_IDLE, ConnectionState.CONNECTED_PUBLISHING}

# event -> {from state: to state}
TRANSITIONS: dict[str, dict[ConnectionState, ConnectionState]] = {
    "connect": {ConnectionState.DISCONNECTED: ConnectionState.CONNECTING},
    "connected": {ConnectionState.CONNECTING: ConnectionState.CONNECTED_IDLE},
    "connect_failed": {ConnectionState.CONNECTING: ConnectionState.DISCONNECTED},
    "start_publishing": {ConnectionState.CONNECTED_IDLE: ConnectionState.CONNECTED_PUBLISHING},
    "stop_publishing": {ConnectionState.CONNECTED_PUBLISHING: ConnectionState.CONNECTED_IDLE},
    "connection_lost": {
        ConnectionState.CONNECTED_IDLE: ConnectionState.RECONNECTING,
        ConnectionState.CONNECTED_PUBLISHING: ConnectionState.RECONNECTING,
    },
    "disconnect": {
        ConnectionState.CONNECTING: ConnectionState.DISCONNECTED,
        ConnectionState.CONNECTED_IDLE: ConnectionState.DISCONNECTED,
        ConnectionState.CONNECTED_PUBLISHING: ConnectionState.DISCONNECTED,
        ConnectionState.RECONNECTING: ConnectionState.DISCONNECTED,
    },
}


class InvalidTransitionError(Exception):
    def __init__(self, state: ConnectionState, event: str):
        super().__init__(f"Cannot '{event}' while {state.value}")
        self.state = state
        self.event = event


class ConnectionStateMachine:
    """Explicit states and named transitions driven by room events.

    ``reconnected`` returns to whichever connected state was active when the
    connection was lost.
    """

    def __init__(self):
        self.state = ConnectionState.DISCONNECTED
        self._state_before_loss: ConnectionState | None = None
        self._listeners: list[Callable[[ConnectionState, ConnectionState], None]] = []

    @property
    def is_connected(self) -> bool:
        return self.state in CONNECTED_STATES

    @property
    def is_publishing(self) -> bool:
        return self.state == ConnectionState.CONNECTED_PUBLISHING

    def on_change(self, listener: Callable[[ConnectionState, ConnectionState], None]) -> None:
        self._listeners.append(listener)

    def can(self, event: str) -> bool:
        if event == "reconnected":
            return self.state == ConnectionState.RECONNECTING
        return self.state in TRANSITIONS.get(event, {})

    def fire(self, event: str) -> ConnectionState:
        """Apply a named transition. Raises InvalidTransitionError if illegal here."""
        if event == "reconnected":
            if self.state != ConnectionState.RECONNECTING:
                raise InvalidTransitionError(self.state, event)
            target = self._state_before_loss or ConnectionState.CONNECTED_IDLE
        else:
            target = TRANSITIONS.get(event, {}).get(self.state)
            if target is None:
                raise InvalidTransitionError(self.state, event)

        if event == "connection_lost":
            self._state_before_loss = self.state
        elif target in (ConnectionState.DISCONNECTED, *CONNECTED_STATES):
            self._state_before_loss = None

        previous, self.state = self.state, target
        logger.debug(f"Connection {previous.value} -> {target.value} ({event})")
        for listener in self._listeners:
            listener(previous, target)
        return target
