"""Matches and breaks in a group's schedule."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Union

from vbcompetitions.core.result import (
    MatchResult,
    assert_continuous_scores_valid,
    calculate_continuous_result,
    calculate_sets_result,
)
from vbcompetitions.exceptions import ScoreError, StructuralError
from vbcompetitions.models.match import BreakData, MatchData, MatchManagerTeam, MatchOfficials, MatchTeam

if TYPE_CHECKING:
    from vbcompetitions.core.group import Group
    from vbcompetitions.core.stage import IfUnknown

logger = logging.getLogger(__name__)


def _check_date(date: Optional[str]) -> None:
    if date is None:
        return
    try:
        datetime.strptime(date, '%Y-%m-%d')
    except ValueError as err:
        raise StructuralError(f'Invalid date "{date}": date does not exist') from err


class ScheduledMatch(ABC):
    """Scheduling and participant details shared by every kind of match."""

    def __init__(self, match_id: str) -> None:
        self.id = match_id
        self.court: Optional[str] = None
        self.venue: Optional[str] = None
        self.date: Optional[str] = None
        self.warmup: Optional[str] = None
        self.start: Optional[str] = None
        self.duration: Optional[str] = None
        self.home_team: Optional[MatchTeam] = None
        self.away_team: Optional[MatchTeam] = None
        self.officials: Optional[MatchOfficials] = None
        self.mvp: Optional[str] = None
        self.manager: Optional[Union[MatchManagerTeam, str]] = None
        self.friendly: Optional[bool] = None
        self.notes: Optional[str] = None

    def _load_details(self, data: MatchData) -> None:
        _check_date(data.date)
        self.court = data.court
        self.venue = data.venue
        self.date = data.date
        self.warmup = data.warmup
        self.start = data.start
        self.duration = data.duration
        self.home_team = data.home_team
        self.away_team = data.away_team
        self.officials = data.officials
        self.mvp = data.mvp
        self.manager = data.manager
        self.friendly = data.friendly
        self.notes = data.notes

    @property
    def is_friendly(self) -> bool:
        return bool(self.friendly)

    @property
    def officials_team_id(self) -> Optional[str]:
        if self.officials is not None and self.officials.is_team:
            return self.officials.team
        return None

    @abstractmethod
    def is_complete(self) -> bool:
        pass

    def _to_dict(self, complete: Optional[bool]) -> dict:
        match = {'id': self.id}
        if self.court is not None:
            match['court'] = self.court
        if self.venue is not None:
            match['venue'] = self.venue
        match['type'] = 'match'
        for key in ('date', 'warmup', 'start', 'duration'):
            if getattr(self, key) is not None:
                match[key] = getattr(self, key)
        if complete is not None:
            match['complete'] = complete
        match['homeTeam'] = self.home_team.to_data()
        match['awayTeam'] = self.away_team.to_data()
        if self.officials is not None:
            match['officials'] = self.officials.to_data()
        if self.mvp is not None:
            match['mvp'] = self.mvp
        if self.manager is not None:
            match['manager'] = self.manager.to_data() if isinstance(self.manager, MatchManagerTeam) else self.manager
        if self.friendly is not None:
            match['friendly'] = self.friendly
        if self.notes is not None:
            match['notes'] = self.notes
        return match


class GroupMatch(ScheduledMatch):
    """A match in a group, with a result worked out from its scores."""

    def __init__(self, group: 'Group', match_id: str) -> None:
        if group.has_match(match_id):
            raise StructuralError(
                f'Group {{{group.stage.id}:{group.id}}}: matches with duplicate IDs {{{match_id}}} not allowed'
            )
        super().__init__(match_id)
        self.group = group
        self.complete: Optional[bool] = None
        self.result = MatchResult()

    @property
    def tag(self) -> str:
        """The ``{STAGE:GROUP:MATCH}`` label used in error messages."""
        return f'{{{self.group.stage.id}:{self.group.id}:{self.id}}}'

    def load_from_data(self, data: MatchData) -> 'GroupMatch':
        """Load the match details, check its teams and work out its result.

        Args:
            data: The match from the document

        Returns:
            This match

        Raises:
            StructuralError: If a team identifier is invalid, the officials are one of
                the playing teams, or a continuous match has no "complete" field
            ScoreError: If the scores break the group's scoring rules
        """
        self._load_details(data)

        if data.complete is None and self.group.is_continuous:
            raise StructuralError(
                f'Group {{{self.group.stage.id}:{self.group.id}}}, match ID {{{self.id}}}, missing field "complete"'
            )
        self.complete = data.complete

        competition = self.group.competition
        competition.validate_team_id(self.home_team.id, self.id, 'homeTeam')
        competition.validate_team_id(self.away_team.id, self.id, 'awayTeam')

        officials_team_id = self.officials_team_id
        if officials_team_id is not None:
            if officials_team_id in (self.home_team.id, self.away_team.id):
                raise StructuralError(
                    f'Refereeing team (in match {self.tag}) cannot be the same as one of the playing teams'
                )
            competition.validate_team_id(officials_team_id, self.id, 'officials')

        self.calculate_result()
        return self

    def calculate_result(self) -> None:
        """Work out completion, the winner and set counts from the current scores.

        Raises:
            ScoreError: If the scores break the group's scoring rules
        """
        try:
            if self.group.is_continuous:
                self.result = calculate_continuous_result(
                    self.home_team.id,
                    self.away_team.id,
                    self.home_team.scores,
                    self.away_team.scores,
                    bool(self.complete),
                    self.group.draws_allowed,
                )
            else:
                self.result = calculate_sets_result(
                    self.home_team.id,
                    self.away_team.id,
                    self.home_team.scores,
                    self.away_team.scores,
                    self.complete,
                    self.duration is not None,
                    self.group.set_config,
                    self.group.draws_allowed,
                )
        except ScoreError as err:
            raise ScoreError(f'Invalid match information (in match {self.tag}): {err}') from err

    def set_scores(self, home_scores: list[int], away_scores: list[int], complete: Optional[bool] = None) -> 'GroupMatch':
        """Replace the scores for this match and work out the new result.

        When the new scores are rejected the match keeps its previous scores.

        Args:
            home_scores: Home team's scores
            away_scores: Away team's scores
            complete: Whether the match is complete; required for continuous matches and
                for set matches with a fixed duration

        Returns:
            This match

        Raises:
            ScoreError: If the scores or completeness are invalid for this group
        """
        if self.group.is_continuous:
            if complete is None:
                raise ScoreError('Invalid score: match type is continuous, but the match completeness is not set')
            assert_continuous_scores_valid(home_scores, away_scores, self.group.draws_allowed)
        else:
            self.group.set_config.assert_scores_valid(home_scores, away_scores)
            if self.duration is not None and complete is None:
                raise ScoreError(
                    'Invalid results: match type is sets and match has a duration, but the match completeness is not set'
                )

        previous = (self.home_team.scores, self.away_team.scores, self.complete, self.result)
        self.home_team.scores = list(home_scores)
        self.away_team.scores = list(away_scores)
        if complete is not None:
            self.complete = complete
        try:
            self.calculate_result()
        except ScoreError:
            self.home_team.scores, self.away_team.scores, self.complete, self.result = previous
            raise

        logger.info(f"Updated scores for match {self.tag}")
        self.group.competition.process_results()
        return self

    def is_complete(self) -> bool:
        return self.result.complete

    def is_draw(self) -> bool:
        return self.result.draw

    @property
    def home_team_sets(self) -> int:
        return self.result.home_sets

    @property
    def away_team_sets(self) -> int:
        return self.result.away_sets

    def get_winner_team_id(self) -> str:
        """The identifier of the winning team.

        Raises:
            ScoreError: If the match is incomplete, drawn or void
        """
        if not self.result.complete:
            raise ScoreError('Match incomplete, there is no winner')
        if self.result.draw or self.result.winner_id is None:
            raise ScoreError('Match drawn, there is no winner')
        return self.result.winner_id

    def get_loser_team_id(self) -> str:
        """The identifier of the losing team.

        Raises:
            ScoreError: If the match is incomplete, drawn or void
        """
        if not self.result.complete:
            raise ScoreError('Match incomplete, there is no loser')
        if self.result.draw or self.result.loser_id is None:
            raise ScoreError('Match drawn, there is no loser')
        return self.result.loser_id

    def to_dict(self) -> dict:
        return self._to_dict(self.complete)


class IfUnknownMatch(ScheduledMatch):
    """A provisional match shown while a stage's teams are unknown. It is never played."""

    def __init__(self, if_unknown: 'IfUnknown', match_id: str) -> None:
        if if_unknown.has_match(match_id):
            raise StructuralError(
                f'stage ID {{{if_unknown.stage.id}}}, ifUnknown: matches with duplicate IDs {{{match_id}}} not allowed'
            )
        super().__init__(match_id)
        self.if_unknown = if_unknown

    def load_from_data(self, data: MatchData) -> 'IfUnknownMatch':
        self._load_details(data)
        return self

    def is_complete(self) -> bool:
        return False

    def is_draw(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return self._to_dict(False)


class GroupBreak:
    """A gap in the schedule, such as lunch or a presentation."""

    def __init__(self, container: Union['Group', 'IfUnknown']) -> None:
        self.container = container
        self.start: Optional[str] = None
        self.date: Optional[str] = None
        self.duration: Optional[str] = None
        self.name: Optional[str] = None

    def load_from_data(self, data: BreakData) -> 'GroupBreak':
        _check_date(data.date)
        self.start = data.start
        self.date = data.date
        self.duration = data.duration
        self.name = data.name
        return self

    def to_dict(self) -> dict:
        entry = {'type': 'break'}
        for key in ('start', 'date', 'duration', 'name'):
            if getattr(self, key) is not None:
                entry[key] = getattr(self, key)
        return entry
