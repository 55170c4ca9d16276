from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator
from pydantic.alias_generators import to_camel


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Models exchanged with clients use camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Question(CamelModel):
    model_config = ConfigDict(frozen=True)

    text: str
    options: Tuple[str, ...]
    correct_option: int  # Index into options
    time_limit: int = Field(gt=0)  # Seconds, advisory only

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question text must not be empty")
        return value

    @field_validator("options")
    @classmethod
    def options_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("question needs at least one option")
        return value

    @field_validator("correct_option", mode="before")
    @classmethod
    def correct_option_not_bool(cls, value):
        if isinstance(value, bool):
            raise ValueError("correct option must be an index")
        return value

    @model_validator(mode="after")
    def correct_option_in_range(self) -> "Question":
        if not 0 <= self.correct_option < len(self.options):
            raise ValueError("correct option out of range")
        return self

    def public(self) -> dict:
        """Fields players may see; the correct option stays on the server."""
        return self.model_dump(mode="json", by_alias=True, include={"text", "options", "time_limit"})


class QuizDraft(CamelModel):
    """Unvalidated creation payload, checked before anything is stored."""

    title: str
    questions: List[Question] = Field(min_length=1)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be empty")
        return value


class Quiz(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    questions: Tuple[Question, ...]
    created_at: datetime = Field(default_factory=_now)

    def public(self) -> dict:
        return {
            'quizId': self.id,
            'title': self.title,
            'totalQuestions': len(self.questions),
            'questions': [q.public() for q in self.questions],
        }


class Player(BaseModel):
    id: str
    name: str
    connection_id: str  # Socket.IO sid
    joined_at: datetime = Field(default_factory=_now)

    def public(self) -> dict:
        return {'id': self.id, 'name': self.name}


class SessionState(str, Enum):
    WAITING = 'waiting'
    ACTIVE = 'active'
    ENDED = 'ended'


class Session(BaseModel):
    pin_code: str
    quiz: Quiz
    players: List[Player] = []
    current_question_index: int = -1  # -1 before start, len(questions) once ended
    state: SessionState = SessionState.WAITING
    scores: Dict[str, int] = {}  # player id -> cumulative score, kept after leaving
    answered: Dict[int, Set[str]] = {}  # question index -> ids that answered it
    created_at: datetime = Field(default_factory=_now)

    @property
    def quiz_id(self) -> str:
        return self.quiz.id

    @property
    def started(self) -> bool:
        return self.state != SessionState.WAITING

    @property
    def question_count(self) -> int:
        return len(self.quiz.questions)

    def current_question(self) -> Question:
        return self.quiz.questions[self.current_question_index]

    def roster(self) -> List[dict]:
        return [p.public() for p in self.players]

    def player_for_connection(self, connection_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.connection_id == connection_id), None)


class AnswerSubmission(CamelModel):
    pin_code: str
    player_id: str
    answer_index: StrictInt
    time_remaining: float = 0

    @field_validator("pin_code", mode="before")
    @classmethod
    def pin_code_as_text(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class JoinResult(CamelModel):
    player_id: str
    quiz_title: str


class AnswerResult(CamelModel):
    is_correct: bool
    correct_option: int
    points: int
    total_score: int


class PlayerScore(CamelModel):
    id: str
    name: str
    score: int
