import asyncio
import random

import pytest

from quizlive.catalog import QuizCatalog
from quizlive.config import Config
from quizlive.registry import SessionRegistry
from quizlive.session_machine import SessionStateMachine
from quizlive.socket_manager import EventRouter


class AppTestConfig(Config):
    CORS_ORIGINS = ["*"]
    STATS_INTERVAL_SEC = 0
    LOG_LEVEL = "WARNING"


class RecordingBroadcaster:
    """In-memory stand-in for the Socket.IO server."""

    def __init__(self):
        self.sent = []  # (connection_id, event, data)
        self.broadcasts = []  # (pin_code, event, data)
        self.rooms = {}  # pin_code -> set of connection ids
        self.closed_rooms = []

    async def send_to(self, connection_id, event, data=None):
        self.sent.append((connection_id, event, data))

    async def broadcast(self, pin_code, event, data=None):
        # Yield to the loop like a real emit would
        await asyncio.sleep(0)
        self.broadcasts.append((pin_code, event, data))

    async def join_room(self, connection_id, pin_code):
        self.rooms.setdefault(pin_code, set()).add(connection_id)

    async def leave_room(self, connection_id, pin_code):
        self.rooms.get(pin_code, set()).discard(connection_id)

    async def close_room(self, pin_code):
        self.rooms.pop(pin_code, None)
        self.closed_rooms.append(pin_code)

    def events(self, name, pin_code=None):
        return [
            data for pin, event, data in self.broadcasts
            if event == name and (pin_code is None or pin == pin_code)
        ]

    def received(self, connection_id, name=None):
        return [
            (event, data) for cid, event, data in self.sent
            if cid == connection_id and (name is None or event == name)
        ]


def make_question(text="Question?", options=("A", "B", "C", "D"), correct=0, time_limit=20):
    return {
        "text": text,
        "options": list(options),
        "correctOption": correct,
        "timeLimit": time_limit,
    }


def make_questions(count=3, time_limit=20):
    return [make_question(text=f"Question {i + 1}?", correct=i % 4, time_limit=time_limit) for i in range(count)]


@pytest.fixture()
def catalog():
    return QuizCatalog()


@pytest.fixture()
def registry(catalog):
    return SessionRegistry(catalog, rng=random.Random(1234))


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def machine(catalog, registry, broadcaster):
    return SessionStateMachine(catalog, registry, broadcaster)


@pytest.fixture()
def router(machine, broadcaster):
    return EventRouter(machine, broadcaster)


@pytest.fixture()
def quiz_id(catalog):
    return catalog.create("General Knowledge", make_questions(3))


@pytest.fixture()
def pin_code(registry, quiz_id):
    return registry.create_session(quiz_id)
