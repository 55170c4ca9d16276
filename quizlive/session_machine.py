"""Session lifecycle: waiting -> active -> ended.

Every operation takes the session's lock, re-reads the session, mutates it
and broadcasts before releasing the lock. Two near-simultaneous calls on the
same PIN therefore run one after the other, and each transition is
broadcast exactly once.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Tuple

from quizlive.broadcaster import Broadcaster
from quizlive.catalog import QuizCatalog
from quizlive.errors import AlreadyAnswered, AlreadyStarted, InvalidPin, InvalidPlayerName, SessionInactive
from quizlive.game_logic import calculate_score, rank_players
from quizlive.models import AnswerResult, JoinResult, Player, Session, SessionState
from quizlive.registry import SessionRegistry

logger = logging.getLogger(__name__)

ENDED_BY_HOST_MESSAGE = 'The quiz has been ended by the host'


class SessionStateMachine:
    def __init__(self, catalog: QuizCatalog, registry: SessionRegistry, broadcaster: Broadcaster) -> None:
        self.catalog = catalog
        self.registry = registry
        self.broadcaster = broadcaster

    @asynccontextmanager
    async def _locked(self, pin_code: str) -> AsyncIterator[Session]:
        lock = self.registry.lock(pin_code)
        async with lock:
            # The session may have been ended, and its PIN handed out again,
            # while we waited for the lock
            session = self.registry.get(pin_code)
            if self.registry.lock(pin_code) is not lock:
                raise InvalidPin()
            yield session

    async def join(self, pin_code: str, player_name: str, connection_id: str) -> JoinResult:
        async with self._locked(pin_code) as session:
            if session.state != SessionState.WAITING:
                raise AlreadyStarted()
            if not isinstance(player_name, str) or not player_name.strip():
                raise InvalidPlayerName()

            player = Player(id=uuid.uuid4().hex, name=player_name.strip(), connection_id=connection_id)
            session.players.append(player)
            session.scores[player.id] = 0

            await self.broadcaster.join_room(connection_id, pin_code)
            await self.broadcaster.broadcast(pin_code, 'player-joined', {'players': session.roster()})
            logger.info("👤 Player %s joined quiz %s", player.name, pin_code)
            return JoinResult(player_id=player.id, quiz_title=session.quiz.title)

    async def start(self, pin_code: str) -> None:
        async with self._locked(pin_code) as session:
            if session.started:
                raise AlreadyStarted()

            session.state = SessionState.ACTIVE
            session.current_question_index = 0

            await self.broadcaster.broadcast(pin_code, 'quiz-started')
            await self._broadcast_question(session)
            logger.info("🚀 Quiz %s started with %d players", pin_code, len(session.players))

    async def advance(self, pin_code: str) -> None:
        async with self._locked(pin_code) as session:
            if session.state != SessionState.ACTIVE:
                raise SessionInactive()

            session.current_question_index += 1

            if session.current_question_index >= session.question_count:
                session.current_question_index = session.question_count
                session.state = SessionState.ENDED
                ranking = rank_players(session.players, session.scores)
                await self.broadcaster.broadcast(pin_code, 'quiz-ended', {
                    'playerScores': [entry.to_payload() for entry in ranking]
                })
                logger.info("🏁 Quiz %s ended", pin_code)
            else:
                await self._broadcast_question(session)
                logger.info("➡️ Quiz %s advanced to question %d", pin_code, session.current_question_index + 1)

    async def submit_answer(self, pin_code: str, player_id: str, answer_index: int, time_remaining: float) -> AnswerResult:
        """Score an answer for the current question.

        The result goes back to the caller only; other players are not told.
        A player gets one answer per question.
        """
        async with self._locked(pin_code) as session:
            if session.state != SessionState.ACTIVE:
                raise SessionInactive()

            index = session.current_question_index
            answered = session.answered.setdefault(index, set())
            if player_id in answered:
                raise AlreadyAnswered()

            question = session.current_question()
            is_correct, points = calculate_score(question, answer_index, time_remaining)
            answered.add(player_id)
            session.scores[player_id] = session.scores.get(player_id, 0) + points

            logger.info("📥 Player %s answered question %d of quiz %s, got %d points",
                        player_id, index + 1, pin_code, points)
            return AnswerResult(
                is_correct=is_correct,
                correct_option=question.correct_option,
                points=points,
                total_score=session.scores[player_id],
            )

    async def end(self, pin_code: str) -> None:
        async with self._locked(pin_code):
            await self.broadcaster.broadcast(pin_code, 'quiz-ended', {'message': ENDED_BY_HOST_MESSAGE})
            self.registry.remove(pin_code)
            await self.broadcaster.close_room(pin_code)
            logger.info("🛑 Quiz %s was manually ended", pin_code)

    async def leave(self, connection_id: str, pin_code: Optional[str] = None) -> List[Tuple[str, Player]]:
        """Drop a connection from the roster of every session it is in.

        With pin_code, only that session is considered (and an unknown PIN
        raises InvalidPin). Scores of departed players are kept.
        """
        if pin_code is not None:
            candidates = [pin_code]
            self.registry.get(pin_code)
        else:
            candidates = self.registry.pin_codes()

        departed = []
        for code in candidates:
            try:
                async with self._locked(code) as session:
                    player = session.player_for_connection(connection_id)
                    if player is None:
                        continue
                    session.players.remove(player)
                    if pin_code is not None:
                        await self.broadcaster.leave_room(connection_id, code)
                    await self.broadcaster.broadcast(code, 'player-left', {
                        'playerId': player.id,
                        'players': session.roster(),
                    })
                    logger.info("👋 Player %s left quiz %s", player.name, code)
                    departed.append((code, player))
            except InvalidPin:
                if pin_code is not None:
                    raise
                # Ended while we were scanning
                continue
        return departed

    def summary(self, pin_code: str) -> dict:
        session = self.registry.get(pin_code)
        return {
            'pinCode': session.pin_code,
            'quizId': session.quiz_id,
            'quizTitle': session.quiz.title,
            'state': session.state.value,
            'questionIndex': session.current_question_index,
            'totalQuestions': session.question_count,
            'players': session.roster(),
        }

    async def _broadcast_question(self, session: Session) -> None:
        await self.broadcaster.broadcast(session.pin_code, 'new-question', {
            'questionIndex': session.current_question_index,
            'totalQuestions': session.question_count,
            'question': session.current_question().public(),
        })
