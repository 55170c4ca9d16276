"""Outbound event delivery, kept apart from the session logic."""

from typing import Any, Optional, Protocol

import socketio


class Broadcaster(Protocol):
    async def send_to(self, connection_id: str, event: str, data: Optional[Any] = None) -> None:
        """Deliver an event to a single connection."""

    async def broadcast(self, pin_code: str, event: str, data: Optional[Any] = None) -> None:
        """Deliver an event to every connection in a session's room."""

    async def join_room(self, connection_id: str, pin_code: str) -> None:
        ...

    async def leave_room(self, connection_id: str, pin_code: str) -> None:
        ...

    async def close_room(self, pin_code: str) -> None:
        ...


class SocketIOBroadcaster:
    """Broadcaster backed by a python-socketio server; one room per PIN code."""

    def __init__(self, sio: socketio.AsyncServer) -> None:
        self.sio = sio

    async def send_to(self, connection_id, event, data=None):
        await self.sio.emit(event, data if data is not None else {}, to=connection_id)

    async def broadcast(self, pin_code, event, data=None):
        await self.sio.emit(event, data if data is not None else {}, room=pin_code)

    async def join_room(self, connection_id, pin_code):
        await self.sio.enter_room(connection_id, pin_code)

    async def leave_room(self, connection_id, pin_code):
        await self.sio.leave_room(connection_id, pin_code)

    async def close_room(self, pin_code):
        await self.sio.close_room(pin_code)
