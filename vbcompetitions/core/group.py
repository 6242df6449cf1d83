"""Groups of matches within a stage."""

import logging
from abc import ABC, abstractmethod
from enum import Enum, IntFlag
from typing import TYPE_CHECKING, Optional, Union

from vbcompetitions.core.match import GroupBreak, GroupMatch
from vbcompetitions.core.references import (
    MATCH_LOSER,
    MATCH_WINNER,
    is_reference,
    match_reference,
    referenced_stage_and_group,
)
from vbcompetitions.core.team import UNKNOWN_TEAM_ID
from vbcompetitions.exceptions import EntityNotFoundError
from vbcompetitions.models.group import GroupData, KnockoutConfig, SetConfig
from vbcompetitions.models.match import BreakData

if TYPE_CHECKING:
    from vbcompetitions.core.competition import Competition
    from vbcompetitions.core.stage import Stage

logger = logging.getLogger(__name__)

GroupEntry = Union[GroupMatch, GroupBreak]


class GroupType(Enum):
    LEAGUE = 'league'
    CROSSOVER = 'crossover'
    KNOCKOUT = 'knockout'


class MatchType(Enum):
    CONTINUOUS = 'continuous'
    SETS = 'sets'


class TeamFilter(IntFlag):
    """Which team IDs to return from ``get_team_ids``.

    When several flags are given the first of ALL, PLAYING, OFFICIATING, MAYBE,
    KNOWN, FIXED_ID wins.
    """

    FIXED_ID = 1
    KNOWN = 2
    MAYBE = 4
    ALL = 8
    PLAYING = 16
    OFFICIATING = 32


class MatchFilter(IntFlag):
    """Which matches to return when filtering matches by team."""

    ALL_IN_GROUP = 1
    PLAYING = 2
    OFFICIATING = 4
    ALL = 8


class Group(ABC):
    """A set of matches scored together: a league, crossover or knockout.

    Groups are created empty by their stage and then filled by ``load_from_data``.
    Lookups that walk the matches are cached until ``clear_caches`` is called.
    """

    group_type: GroupType

    def __init__(self, stage: 'Stage', group_id: str, match_type: MatchType) -> None:
        self.stage = stage
        self.id = group_id
        self.match_type = match_type
        self.name: Optional[str] = None
        self.notes: Optional[str] = None
        self.description: Optional[list[str]] = None
        self.sets: Optional[SetConfig] = None
        self.entries: list[GroupEntry] = []
        self._match_lookup: dict[str, GroupMatch] = {}
        self._team_ids: dict[str, None] = {}
        self._playing_team_ids: dict[str, None] = {}
        self._officiating_team_ids: dict[str, None] = {}
        self._team_references: list[str] = []
        self._default_set_config = SetConfig()
        self.clear_caches()

    @property
    def competition(self) -> 'Competition':
        return self.stage.competition

    @property
    def is_continuous(self) -> bool:
        return self.match_type is MatchType.CONTINUOUS

    @property
    def set_config(self) -> SetConfig:
        """The set rules, falling back to the default rules when none were given."""
        return self.sets if self.sets is not None else self._default_set_config

    @property
    def draws_allowed(self) -> bool:
        return False

    @property
    def tag(self) -> str:
        return f'{{{self.stage.id}:{self.id}}}'

    def load_from_data(self, data: GroupData) -> 'Group':
        """Load the group configuration and its matches, then process the results.

        Args:
            data: The group from the document

        Returns:
            This group
        """
        self.name = data.name
        self.notes = data.notes
        self.description = data.description
        self.sets = data.sets
        self._load_config(data)

        for entry in data.matches:
            if isinstance(entry, BreakData):
                self.add_break(GroupBreak(self).load_from_data(entry))
            else:
                match = GroupMatch(self, entry.id)
                match.load_from_data(entry)
                self.add_match(match)

        self.process_matches()
        logger.debug(f"Loaded group {self.tag} with {len(self._match_lookup)} matches")
        return self

    @abstractmethod
    def _load_config(self, data: GroupData) -> None:
        """Load the settings specific to this type of group."""

    def add_match(self, match: GroupMatch) -> 'Group':
        self.entries.append(match)
        self._match_lookup[match.id] = match

        for team_id in (match.home_team.id, match.away_team.id):
            if is_reference(team_id):
                self._team_references.append(team_id)
            self._playing_team_ids[team_id] = None
            self._team_ids[team_id] = None

        officials_team_id = match.officials_team_id
        if officials_team_id is not None:
            self._team_ids[officials_team_id] = None
            self._officiating_team_ids[officials_team_id] = None

        self.clear_caches()
        return self

    def add_break(self, group_break: GroupBreak) -> 'Group':
        self.entries.append(group_break)
        return self

    def process_matches(self) -> None:
        """Register the winner and loser of each decided match as team references."""
        competition = self.competition
        for match in self.matches:
            if not match.result.decided:
                continue
            outcomes = ((MATCH_WINNER, match.get_winner_team_id()), (MATCH_LOSER, match.get_loser_team_id()))
            for entity, team_id in outcomes:
                team = competition.get_team(team_id)
                if not team.is_unknown:
                    competition.add_team_reference(match_reference(self.stage.id, self.id, match.id, entity), team)

    def clear_caches(self) -> None:
        self._is_complete: Optional[bool] = None
        self._maybe_team_ids: Optional[list[str]] = None
        self._referenced_groups: Optional[list[tuple[str, str]]] = None
        self._team_has_matches: dict[str, bool] = {}
        self._team_has_officiating: dict[str, bool] = {}

    @property
    def matches(self) -> list[GroupMatch]:
        """The matches in this group, without breaks."""
        return [entry for entry in self.entries if isinstance(entry, GroupMatch)]

    def has_match(self, match_id: str) -> bool:
        return match_id in self._match_lookup

    def get_match(self, match_id: str) -> GroupMatch:
        """Get a match by ID.

        Raises:
            EntityNotFoundError: If there is no match with that ID in this group
        """
        if match_id not in self._match_lookup:
            raise EntityNotFoundError(f'Match with ID {match_id} not found')
        return self._match_lookup[match_id]

    def _is_playing(self, match: GroupMatch, team_id: str) -> bool:
        competition = self.competition
        return (competition.get_team(match.home_team.id).id == team_id
                or competition.get_team(match.away_team.id).id == team_id)

    def _is_officiating(self, match: GroupMatch, team_id: str) -> bool:
        officials_team_id = match.officials_team_id
        return officials_team_id is not None and self.competition.get_team(officials_team_id).id == team_id

    def _team_in_match(self, match: GroupMatch, team_id: str, flags: MatchFilter) -> bool:
        if flags & MatchFilter.PLAYING and self._is_playing(match, team_id):
            return True
        return bool(flags & MatchFilter.OFFICIATING) and self._is_officiating(match, team_id)

    def get_matches(self, team_id: Optional[str] = None, flags: MatchFilter = MatchFilter(0)) -> list[GroupEntry]:
        """Get the schedule, optionally only the matches involving a team.

        With no team, an unresolved team or ALL_IN_GROUP every entry (breaks
        included) is returned.

        Args:
            team_id: Team to filter by
            flags: PLAYING and/or OFFICIATING to choose which involvement counts

        Returns:
            Matches (and breaks) in schedule order
        """
        if (team_id is None or flags & MatchFilter.ALL_IN_GROUP
                or team_id == UNKNOWN_TEAM_ID or is_reference(team_id)):
            return list(self.entries)
        return [match for match in self.matches if self._team_in_match(match, team_id, flags)]

    def get_team_ids(self, flags: TeamFilter = TeamFilter.FIXED_ID) -> list[str]:
        """Get the IDs of teams in this group.

        Args:
            flags: One of the TeamFilter values

        Returns:
            Team IDs; KNOWN and FIXED_ID results are sorted by team name. KNOWN gives
            the resolved ID of each known team once, so a team entered both by ID and
            by a resolved reference is counted once
        """
        if flags & TeamFilter.ALL:
            return list(self._team_ids)
        if flags & TeamFilter.PLAYING:
            return list(self._playing_team_ids)
        if flags & TeamFilter.OFFICIATING:
            return list(self._officiating_team_ids)
        if flags & TeamFilter.MAYBE:
            return self._get_maybe_team_ids()

        competition = self.competition
        if flags & TeamFilter.KNOWN:
            teams = {}
            for team_id in self._team_ids:
                team = competition.get_team(team_id)
                if not team.is_unknown:
                    teams[team.id] = team
            return sorted(teams, key=lambda key: teams[key].name)
        if flags & TeamFilter.FIXED_ID:
            fixed_ids = [team_id for team_id in self._team_ids if not is_reference(team_id)]
            return sorted(fixed_ids, key=lambda key: competition.get_team(key).name)
        return []

    def _get_referenced_groups(self) -> list['Group']:
        """Groups that this group's team references point into, in order of first use."""
        if self._referenced_groups is None:
            self._referenced_groups = []
            for match in self.matches:
                for team_id in (match.home_team.id, match.away_team.id, match.officials_team_id):
                    if team_id is None:
                        continue
                    stage_and_group = referenced_stage_and_group(team_id)
                    if stage_and_group is not None and stage_and_group not in self._referenced_groups:
                        self._referenced_groups.append(stage_and_group)

        competition = self.competition
        return [
            competition.get_stage(stage_id).get_group(group_id)
            for stage_id, group_id in self._referenced_groups
        ]

    def _get_maybe_team_ids(self) -> list[str]:
        if self.is_complete():
            # Everything is known once the group is complete
            return []
        if self._maybe_team_ids is None:
            maybe_team_ids: dict[str, None] = {}
            for group in self._get_referenced_groups():
                if group is self or group.is_complete():
                    continue
                for team_id in group.get_team_ids(TeamFilter.KNOWN) + group.get_team_ids(TeamFilter.MAYBE):
                    maybe_team_ids[team_id] = None
            self._maybe_team_ids = list(maybe_team_ids)
        return self._maybe_team_ids

    def is_complete(self) -> bool:
        """Whether every match in the group is complete."""
        if self._is_complete is None:
            self._is_complete = all(match.is_complete() for match in self.matches)
        return self._is_complete

    def all_teams_known(self) -> bool:
        """Whether every group this group's team references point into is complete."""
        competition = self.competition
        for team_reference in self._team_references:
            stage_and_group = referenced_stage_and_group(team_reference)
            if stage_and_group is None:
                continue
            stage_id, group_id = stage_and_group
            if not competition.get_stage(stage_id).get_group(group_id).is_complete():
                return False
        return True

    def team_has_matches(self, team_id: str) -> bool:
        """Whether the team plays in a match in this group, resolving references."""
        if team_id not in self._team_has_matches:
            self._team_has_matches[team_id] = any(self._is_playing(match, team_id) for match in self.matches)
        return self._team_has_matches[team_id]

    def team_has_officiating(self, team_id: str) -> bool:
        """Whether the team officiates a match in this group, resolving references."""
        if team_id not in self._team_has_officiating:
            self._team_has_officiating[team_id] = any(
                self._is_officiating(match, team_id) for match in self.matches
            )
        return self._team_has_officiating[team_id]

    def team_may_have_matches(self, team_id: str) -> bool:
        """Whether there is a route for the team into this group's matches.

        This follows unresolved references back into incomplete groups; it does not
        check whether the team can still mathematically qualify. Always False once the
        group is complete, when ``team_has_matches`` gives the definite answer.
        """
        if self.is_complete():
            return False
        if self.competition.get_team(team_id).is_unknown:
            return False

        for group in self._get_referenced_groups():
            if group is self:
                if self.team_has_matches(team_id):
                    return True
                continue
            if (not group.is_complete() and group.team_has_matches(team_id)) or group.team_may_have_matches(team_id):
                return True
        return False

    def get_match_dates(self, team_id: Optional[str] = None, flags: MatchFilter = MatchFilter.PLAYING) -> list[str]:
        """Get the dates on which matches are played, optionally only those involving a team."""
        all_matches = team_id is None or team_id == UNKNOWN_TEAM_ID or flags & MatchFilter.ALL
        dates: dict[str, None] = {}
        for match in self.matches:
            if match.date is None:
                continue
            if all_matches or self._team_in_match(match, team_id, flags):
                dates[match.date] = None
        return list(dates)

    def get_matches_on_date(
        self,
        date: str,
        team_id: Optional[str] = None,
        flags: MatchFilter = MatchFilter.ALL,
    ) -> list[GroupEntry]:
        """Get the matches and breaks on a date, optionally only the matches involving a team."""
        all_matches = team_id is None or team_id == UNKNOWN_TEAM_ID or flags & MatchFilter.ALL
        entries = []
        for entry in self.entries:
            if entry.date != date:
                continue
            if all_matches or isinstance(entry, GroupBreak) or self._team_in_match(entry, team_id, flags):
                entries.append(entry)
        return entries

    @abstractmethod
    def _config_to_dict(self) -> dict:
        """The type specific settings as document fields."""

    def to_dict(self) -> dict:
        group = {'id': self.id}
        if self.name is not None:
            group['name'] = self.name
        if self.notes is not None:
            group['notes'] = self.notes
        if self.description is not None:
            group['description'] = self.description
        group['type'] = self.group_type.value
        group.update(self._config_to_dict())
        group['matchType'] = self.match_type.value
        if self.sets is not None:
            group['sets'] = self.sets.to_data()
        group['matches'] = [entry.to_dict() for entry in self.entries]
        return group


class Crossover(Group):
    """Teams from different groups play each other; there is no table."""

    group_type = GroupType.CROSSOVER

    def _load_config(self, data: GroupData) -> None:
        pass

    def _config_to_dict(self) -> dict:
        return {}


class Knockout(Group):
    """An elimination bracket with an optional display of final placings."""

    group_type = GroupType.KNOCKOUT

    def __init__(self, stage: 'Stage', group_id: str, match_type: MatchType) -> None:
        super().__init__(stage, group_id, match_type)
        self.knockout_config: Optional[KnockoutConfig] = None

    def _load_config(self, data: GroupData) -> None:
        self.knockout_config = data.knockout

    def _config_to_dict(self) -> dict:
        if self.knockout_config is None:
            return {}
        return {'knockout': self.knockout_config.to_data()}
