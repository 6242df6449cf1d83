"""Group configuration document models."""

from typing import Literal, Optional

from pydantic import Field, StrictBool, StrictInt, model_validator

from vbcompetitions.exceptions import ScoreError
from vbcompetitions.models.base import ID_PATTERN, DocumentModel
from vbcompetitions.models.match import GroupEntryData

OrderingCriterion = Literal['PTS', 'WINS', 'LOSSES', 'H2H', 'PF', 'PA', 'PD', 'SF', 'SA', 'SD', 'BP', 'PP']


class SetConfig(DocumentModel):
    """Rules for matches played as a number of sets.

    The last possible set (index ``max_sets - 1``) is the decider and uses its own
    points-to-win and maximum points values.
    """

    max_sets: StrictInt = Field(5, alias="maxSets", ge=1)
    sets_to_win: StrictInt = Field(3, alias="setsToWin", ge=1)
    clear_points: StrictInt = Field(2, alias="clearPoints", ge=1)
    min_points: StrictInt = Field(1, alias="minPoints", ge=1)
    points_to_win: StrictInt = Field(25, alias="pointsToWin", ge=1)
    last_set_points_to_win: StrictInt = Field(15, alias="lastSetPointsToWin", ge=1)
    max_points: StrictInt = Field(1000, alias="maxPoints", ge=1)
    last_set_max_points: StrictInt = Field(1000, alias="lastSetMaxPoints", ge=1)

    def is_decider(self, set_number: int) -> bool:
        """Whether the zero-based set number is the deciding set."""
        return set_number == self.max_sets - 1

    def is_set_complete(self, set_number: int, home_score: int, away_score: int) -> bool:
        """Work out whether a single set has finished.

        A set is complete when one side has reached the points needed and is clear by
        enough points, or when either side has reached the maximum points for the set.

        Args:
            set_number: Zero-based index of the set
            home_score: Home team's score in the set
            away_score: Away team's score in the set

        Returns:
            True if the set is complete
        """
        if self.is_decider(set_number):
            points_to_win = self.last_set_points_to_win
            max_points = self.last_set_max_points
        else:
            points_to_win = self.points_to_win
            max_points = self.max_points

        has_enough_points = home_score >= points_to_win or away_score >= points_to_win
        is_clear = abs(home_score - away_score) >= self.clear_points
        has_max_points = home_score == max_points or away_score == max_points
        return (has_enough_points and is_clear) or has_max_points

    def assert_scores_valid(self, home_scores: list[int], away_scores: list[int]) -> None:
        """Check a pair of set score arrays against these rules.

        Args:
            home_scores: Home team's score for each set
            away_scores: Away team's score for each set

        Raises:
            ScoreError: If the arrays differ in length, hold too many sets, have scores after
                an unfinished set or show a decider won by more than necessary
        """
        if len(home_scores) != len(away_scores):
            raise ScoreError('Invalid set scores: score arrays are different lengths')

        if len(home_scores) > self.max_sets:
            raise ScoreError('Invalid set scores: score arrays are longer than the maximum number of sets allowed')

        seen_incomplete_set = False
        for set_number, (home, away) in enumerate(zip(home_scores, away_scores)):
            if seen_incomplete_set and (home != 0 or away != 0):
                raise ScoreError('Invalid set scores: data contains non-zero scores for a set after an incomplete set')

            if self.is_decider(set_number):
                # e.g. 28-25 when 15 points win the decider
                if abs(home - away) > self.clear_points and min(home, away) > self.last_set_points_to_win:
                    side = 'home' if home > away else 'away'
                    raise ScoreError(
                        f'Invalid set scores: value for set score at index {set_number} shows '
                        f'{side} team scoring more points than necessary to win the set'
                    )
            elif not self.is_set_complete(set_number, home, away):
                seen_incomplete_set = True


class LeaguePoints(DocumentModel):
    """League points awarded for results."""

    played: StrictInt = 0
    per_set: StrictInt = Field(0, alias="perSet")
    win: StrictInt = 3
    win_by_one: StrictInt = Field(0, alias="winByOne")
    lose: StrictInt = 0
    lose_by_one: StrictInt = Field(0, alias="loseByOne")
    forfeit: StrictInt = 0


class LeagueConfig(DocumentModel):
    """How a league table is ordered and scored."""

    ordering: list[OrderingCriterion] = Field(..., min_length=1)
    points: LeaguePoints = Field(default_factory=LeaguePoints)


class KnockoutStanding(DocumentModel):
    """A final placing in a knockout group."""

    position: str = Field(..., min_length=1, max_length=1000)
    id: str = Field(..., min_length=1, max_length=1000)


class KnockoutConfig(DocumentModel):
    """Display configuration for a knockout group."""

    standing: list[KnockoutStanding] = Field(default_factory=list)


class GroupData(DocumentModel):
    """A group of matches within a stage."""

    id: str = Field(..., min_length=1, max_length=100, pattern=ID_PATTERN)
    name: Optional[str] = Field(None, min_length=1, max_length=1000)
    notes: Optional[str] = None
    description: Optional[list[str]] = Field(None, min_length=1)
    type: Literal['league', 'crossover', 'knockout']
    match_type: Literal['continuous', 'sets'] = Field(..., alias="matchType")
    sets: Optional[SetConfig] = None
    league: Optional[LeagueConfig] = None
    knockout: Optional[KnockoutConfig] = None
    draws_allowed: Optional[StrictBool] = Field(None, alias="drawsAllowed")
    matches: list[GroupEntryData] = Field(..., min_length=1)

    @model_validator(mode='after')
    def check_group_config(self) -> 'GroupData':
        if self.type == 'league' and self.league is None:
            raise ValueError('a league group must have a "league" configuration')
        if self.type != 'league' and self.league is not None:
            raise ValueError('only a league group can have a "league" configuration')
        if self.type != 'league' and self.draws_allowed is not None:
            raise ValueError('only a league group can set "drawsAllowed"')
        if self.type != 'knockout' and self.knockout is not None:
            raise ValueError('only a knockout group can have a "knockout" configuration')
        if self.match_type == 'continuous' and self.sets is not None:
            raise ValueError('a group with continuous scoring cannot have a "sets" configuration')
        return self
