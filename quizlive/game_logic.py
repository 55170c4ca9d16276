import math
from typing import Dict, Iterable, List, Tuple

from quizlive.models import Player, PlayerScore, Question

BASE_POINTS = 100
MAX_TIME_BONUS = 100


def calculate_score(question: Question, answer_index: int, time_remaining: float) -> Tuple[bool, int]:
    """
    Score a submitted answer.

    Correct answer: 100 base + up to 100 bonus, proportional to the share of
    the time limit still left on the client's clock.
    Wrong answer: 0 points.

    time_remaining is reported by the client, so it is clamped to
    [0, time_limit] before the bonus is computed.
    """
    is_correct = not isinstance(answer_index, bool) and answer_index == question.correct_option
    if not is_correct:
        return False, 0

    remaining = float(time_remaining)
    if math.isnan(remaining):
        remaining = 0.0
    remaining = min(max(remaining, 0.0), float(question.time_limit))
    time_bonus = math.floor(MAX_TIME_BONUS * remaining / question.time_limit)
    return True, BASE_POINTS + time_bonus


def rank_players(players: Iterable[Player], scores: Dict[str, int]) -> List[PlayerScore]:
    """Final ranking: highest score first, ties keep join order."""
    ranking = [
        PlayerScore(id=player.id, name=player.name, score=scores.get(player.id, 0))
        for player in players
    ]
    # sorted() is stable, so equal scores stay in roster order
    return sorted(ranking, key=lambda entry: entry.score, reverse=True)
