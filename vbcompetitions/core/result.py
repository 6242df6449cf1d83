"""Working out the result of a match from its scores."""

from dataclasses import dataclass
from typing import Optional

from vbcompetitions.exceptions import ScoreError
from vbcompetitions.models.group import SetConfig


@dataclass
class MatchResult:
    """The outcome of a match.

    ``winner_id`` and ``loser_id`` are only set for a complete match that was not
    drawn. A complete continuous match scored 0-0 has neither a winner nor a draw.
    """

    complete: bool = False
    draw: bool = False
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    home_sets: int = 0
    away_sets: int = 0

    @property
    def decided(self) -> bool:
        return self.complete and self.winner_id is not None


def assert_continuous_scores_valid(home_scores: list[int], away_scores: list[int], draws_allowed: bool) -> None:
    """Check score arrays for a match with a single continuous score.

    Raises:
        ScoreError: If the arrays differ in length, hold more than one score, or show
            a draw when draws are not allowed
    """
    if len(home_scores) != len(away_scores):
        raise ScoreError('Invalid results: score lengths are different')
    if len(home_scores) > 1:
        raise ScoreError('Invalid results: match type is continuous, but score length is greater than one')
    if home_scores and not draws_allowed and home_scores[0] == away_scores[0] and home_scores[0] != 0:
        raise ScoreError('Invalid score: draws not allowed in this group')


def calculate_continuous_result(
    home_id: str,
    away_id: str,
    home_scores: list[int],
    away_scores: list[int],
    complete: bool,
    draws_allowed: bool,
) -> MatchResult:
    """Work out the result of a continuously scored match.

    Completion only ever comes from the explicit ``complete`` flag.

    Raises:
        ScoreError: If the scores are invalid, or a complete match is drawn when
            draws are not allowed
    """
    if len(home_scores) != len(away_scores):
        raise ScoreError('team scores have different length')
    if len(home_scores) > 1:
        raise ScoreError('match type is continuous, but score length is greater than one')

    result = MatchResult(complete=complete)
    if not complete:
        return result
    if not home_scores:
        raise ScoreError('match is complete but has no scores')

    home, away = home_scores[0], away_scores[0]
    if home + away == 0:
        return result

    if home > away:
        result.winner_id, result.loser_id = home_id, away_id
    elif home < away:
        result.winner_id, result.loser_id = away_id, home_id
    elif draws_allowed:
        result.draw = True
    else:
        raise ScoreError('scores show a draw but draws are not allowed')
    return result


def calculate_sets_result(
    home_id: str,
    away_id: str,
    home_scores: list[int],
    away_scores: list[int],
    complete: Optional[bool],
    has_duration: bool,
    set_config: SetConfig,
    draws_allowed: bool,
) -> MatchResult:
    """Work out the result of a match played in sets.

    A match with no fixed duration is complete once a side has won enough sets, or
    all sets have been played. Sets where both sides are below the minimum points
    have not been played and are ignored.

    Args:
        home_id: Home team identifier
        away_id: Away team identifier
        home_scores: Home team's score for each set
        away_scores: Away team's score for each set
        complete: Explicit completion flag from the data, if any
        has_duration: Whether the match is played for a fixed time
        set_config: The set rules for the group
        draws_allowed: Whether the group allows draws

    Returns:
        The match result

    Raises:
        ScoreError: If the set scores break the set rules, or a complete match is
            drawn when draws are not allowed
    """
    set_config.assert_scores_valid(home_scores, away_scores)

    result = MatchResult(complete=bool(complete))
    for set_number, (home, away) in enumerate(zip(home_scores, away_scores)):
        if home < set_config.min_points and away < set_config.min_points:
            continue
        if result.complete or set_config.is_set_complete(set_number, home, away):
            if home > away:
                result.home_sets += 1
            elif home < away:
                result.away_sets += 1

    if not has_duration and (
        result.home_sets + result.away_sets == set_config.max_sets
        or result.home_sets >= set_config.sets_to_win
        or result.away_sets >= set_config.sets_to_win
    ):
        result.complete = True

    if result.complete:
        if result.home_sets > result.away_sets:
            result.winner_id, result.loser_id = home_id, away_id
        elif result.home_sets < result.away_sets:
            result.winner_id, result.loser_id = away_id, home_id
        elif draws_allowed:
            result.draw = True
        else:
            raise ScoreError('scores show a draw but draws are not allowed')
    return result
