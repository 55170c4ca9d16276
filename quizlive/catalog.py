"""In-memory store of quiz definitions."""

import logging
import uuid
from typing import Any, Dict

from pydantic import ValidationError

from quizlive.errors import InvalidQuizData, QuizNotFound
from quizlive.models import Quiz, QuizDraft

logger = logging.getLogger(__name__)


class QuizCatalog:
    """Holds immutable quizzes keyed by id for the lifetime of the process."""

    def __init__(self) -> None:
        self._quizzes: Dict[str, Quiz] = {}

    def create(self, title: Any, questions: Any) -> str:
        """Validate and store a quiz, returning its new id.

        Raises InvalidQuizData when the title is blank, questions is not a
        non-empty list, or any question is malformed. Nothing is stored on
        failure.
        """
        if not isinstance(questions, list):
            raise InvalidQuizData()
        try:
            draft = QuizDraft.model_validate({'title': title, 'questions': questions})
        except ValidationError as exc:
            logger.warning("Rejected quiz %r: %d validation error(s)", title, exc.error_count())
            raise InvalidQuizData() from exc

        quiz = Quiz(id=str(uuid.uuid4()), title=draft.title, questions=tuple(draft.questions))
        self._quizzes[quiz.id] = quiz
        logger.info("📚 Stored quiz %s %r with %d questions", quiz.id, quiz.title, len(quiz.questions))
        return quiz.id

    def get(self, quiz_id: str) -> Quiz:
        try:
            return self._quizzes[quiz_id]
        except KeyError:
            raise QuizNotFound() from None

    def __contains__(self, quiz_id: object) -> bool:
        return quiz_id in self._quizzes

    def __len__(self) -> int:
        return len(self._quizzes)
