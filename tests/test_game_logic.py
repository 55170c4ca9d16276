import pytest

from quizlive.game_logic import calculate_score, rank_players
from quizlive.models import Player, Question


def question(correct=0, time_limit=20):
    return Question(text="Q?", options=("A", "B", "C", "D"), correct_option=correct, time_limit=time_limit)


def test_full_time_left_scores_200():
    assert calculate_score(question(), 0, 20) == (True, 200)


def test_no_time_left_scores_100():
    assert calculate_score(question(), 0, 0) == (True, 100)


def test_half_time_left_scores_150():
    assert calculate_score(question(), 0, 10) == (True, 150)


def test_bonus_is_floored():
    assert calculate_score(question(time_limit=30), 0, 10) == (True, 133)
    assert calculate_score(question(time_limit=3), 0, 2.99) == (True, 199)


@pytest.mark.parametrize("time_remaining", [0, 5, 20, 1000, -3])
def test_wrong_answer_scores_zero(time_remaining):
    assert calculate_score(question(correct=2), 1, time_remaining) == (False, 0)


def test_time_remaining_clamped_to_limit():
    assert calculate_score(question(), 0, 500) == (True, 200)
    assert calculate_score(question(), 0, -5) == (True, 100)
    assert calculate_score(question(), 0, float("nan")) == (True, 100)


def test_bool_is_not_an_answer_index():
    assert calculate_score(question(correct=1), True, 10) == (False, 0)


def test_out_of_range_answer_is_wrong():
    assert calculate_score(question(), 7, 10) == (False, 0)


def players(*names):
    return [Player(id=f"id-{name}", name=name, connection_id=f"sid-{name}") for name in names]


def test_ranking_by_descending_score():
    roster = players("ann", "bob", "cat")
    scores = {"id-ann": 120, "id-bob": 190, "id-cat": 0}
    ranking = rank_players(roster, scores)
    assert [entry.name for entry in ranking] == ["bob", "ann", "cat"]
    assert ranking[0].to_payload() == {"id": "id-bob", "name": "bob", "score": 190}


def test_ranking_ties_keep_join_order():
    roster = players("ann", "bob", "cat", "dan")
    scores = {"id-ann": 100, "id-bob": 150, "id-cat": 100, "id-dan": 150}
    assert [entry.name for entry in rank_players(roster, scores)] == ["bob", "dan", "ann", "cat"]


def test_ranking_missing_score_counts_as_zero():
    roster = players("ann", "bob")
    ranking = rank_players(roster, {"id-bob": 100})
    assert [(entry.name, entry.score) for entry in ranking] == [("bob", 100), ("ann", 0)]
