import functools
import logging
from typing import Any, Awaitable, Callable, Dict

import socketio
from pydantic import ValidationError

from quizlive.broadcaster import Broadcaster
from quizlive.errors import InvalidAnswer, InvalidPin, QuizError
from quizlive.models import AnswerSubmission
from quizlive.session_machine import SessionStateMachine

logger = logging.getLogger(__name__)

Handler = Callable[[str, Any], Awaitable[None]]


def create_sio(config) -> socketio.AsyncServer:
    origins = config.CORS_ORIGINS
    return socketio.AsyncServer(
        async_mode='asgi',
        cors_allowed_origins='*' if origins == ['*'] else origins,
        logger=config.SOCKETIO_LOGGER,
        engineio_logger=config.SOCKETIO_LOGGER,
        ping_timeout=config.PING_TIMEOUT,
        ping_interval=config.PING_INTERVAL,
    )


def _field(data: Any, name: str) -> Any:
    return data.get(name) if isinstance(data, dict) else None


def _pin_code(data: Any) -> Any:
    pin_code = _field(data, 'pinCode')
    # Some clients send the PIN as a number
    if isinstance(pin_code, int) and not isinstance(pin_code, bool):
        return str(pin_code)
    return pin_code


def _reports_errors(handler: Handler) -> Handler:
    """Turn failures into an `error` event for the sender only."""

    @functools.wraps(handler)
    async def wrapper(self, sid, data=None):
        try:
            await handler(self, sid, data)
        except QuizError as exc:
            logger.warning("❌ %s from %s rejected: %s", handler.__name__, sid, exc.message)
            await self.broadcaster.send_to(sid, 'error', {'message': exc.message})
        except Exception:
            logger.exception("Unexpected failure in %s from %s", handler.__name__, sid)
            await self.broadcaster.send_to(sid, 'error', {'message': 'Internal server error'})

    return wrapper


class EventRouter:
    """Maps inbound Socket.IO events onto session operations."""

    def __init__(self, machine: SessionStateMachine, broadcaster: Broadcaster) -> None:
        self.machine = machine
        self.broadcaster = broadcaster

    def register(self, sio: socketio.AsyncServer) -> None:
        for event, handler in self.handlers().items():
            sio.on(event, handler=handler)

    def handlers(self) -> Dict[str, Callable]:
        return {
            'connect': self.connect,
            'disconnect': self.disconnect,
            'join-quiz': self.join_quiz,
            'start-quiz': self.start_quiz,
            'next-question': self.next_question,
            'submit-answer': self.submit_answer,
            'end-quiz': self.end_quiz,
            'leave-quiz': self.leave_quiz,
        }

    async def connect(self, sid, environ, auth=None):
        logger.info("✅ Client connected: %s", sid)

    async def disconnect(self, sid, reason=None):
        logger.info("❌ Client disconnected: %s", sid)
        await self.machine.leave(sid)

    @_reports_errors
    async def join_quiz(self, sid, data):
        result = await self.machine.join(_pin_code(data), _field(data, 'playerName'), sid)
        await self.broadcaster.send_to(sid, 'joined', result.to_payload())

    @_reports_errors
    async def start_quiz(self, sid, data):
        await self.machine.start(_pin_code(data))

    @_reports_errors
    async def next_question(self, sid, data):
        await self.machine.advance(_pin_code(data))

    @_reports_errors
    async def submit_answer(self, sid, data):
        try:
            submission = AnswerSubmission.model_validate(data or {})
        except ValidationError as exc:
            raise InvalidAnswer() from exc
        result = await self.machine.submit_answer(
            submission.pin_code,
            submission.player_id,
            submission.answer_index,
            submission.time_remaining,
        )
        await self.broadcaster.send_to(sid, 'answer-result', result.to_payload())

    @_reports_errors
    async def end_quiz(self, sid, data):
        await self.machine.end(_pin_code(data))

    @_reports_errors
    async def leave_quiz(self, sid, data):
        pin_code = _pin_code(data)
        if pin_code is None:
            raise InvalidPin()
        departed = await self.machine.leave(sid, pin_code=pin_code)
        if departed:
            await self.broadcaster.send_to(sid, 'left', {'pinCode': pin_code})
