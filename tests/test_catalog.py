import pytest
from pydantic import ValidationError

from quizlive.errors import InvalidQuizData, QuizNotFound
from tests.conftest import make_question, make_questions


def test_create_and_get_round_trip(catalog):
    questions = make_questions(3, time_limit=15)
    quiz_id = catalog.create("Capitals", questions)

    quiz = catalog.get(quiz_id)
    assert quiz.id == quiz_id
    assert quiz.title == "Capitals"
    assert len(quiz.questions) == 3
    for stored, original in zip(quiz.questions, questions):
        assert stored.text == original["text"]
        assert list(stored.options) == original["options"]
        assert stored.correct_option == original["correctOption"]
        assert stored.time_limit == original["timeLimit"]


def test_each_quiz_gets_a_fresh_id(catalog):
    first = catalog.create("One", make_questions(1))
    second = catalog.create("One", make_questions(1))
    assert first != second
    assert len(catalog) == 2
    assert first in catalog


def test_accepts_snake_case_question_fields(catalog):
    quiz_id = catalog.create("Snake", [
        {"text": "Q?", "options": ["x", "y"], "correct_option": 1, "time_limit": 5}
    ])
    assert catalog.get(quiz_id).questions[0].correct_option == 1


@pytest.mark.parametrize("title, questions", [
    ("", make_questions(1)),
    ("   ", make_questions(1)),
    (None, make_questions(1)),
    (42, make_questions(1)),
    ("Quiz", []),
    ("Quiz", None),
    ("Quiz", {"text": "not a list"}),
    ("Quiz", "questions"),
    ("Quiz", [make_question(options=())]),
    ("Quiz", [make_question(correct=4)]),
    ("Quiz", [make_question(correct=-1)]),
    ("Quiz", [make_question(correct=True)]),
    ("Quiz", [make_question(time_limit=0)]),
    ("Quiz", [make_question(time_limit=-10)]),
    ("Quiz", [make_question(text="")]),
    ("Quiz", [make_question(options=(1, 2))]),
    ("Quiz", [{"text": "Missing fields"}]),
    ("Quiz", [make_question(), "not a question"]),
])
def test_rejects_invalid_quiz_data(catalog, title, questions):
    with pytest.raises(InvalidQuizData) as excinfo:
        catalog.create(title, questions)
    assert excinfo.value.message == "Invalid quiz data"
    assert len(catalog) == 0


def test_get_unknown_quiz(catalog):
    with pytest.raises(QuizNotFound):
        catalog.get("does-not-exist")


def test_quiz_is_immutable(catalog):
    quiz = catalog.get(catalog.create("Frozen", make_questions(1)))
    with pytest.raises(ValidationError):
        quiz.title = "Changed"
    with pytest.raises(ValidationError):
        quiz.questions[0].correct_option = 2


def test_public_view_hides_correct_option(catalog):
    quiz = catalog.get(catalog.create("Hidden", make_questions(2)))
    public = quiz.public()
    assert public["totalQuestions"] == 2
    assert public["questions"][0] == {
        "text": "Question 1?",
        "options": ["A", "B", "C", "D"],
        "timeLimit": 20,
    }
