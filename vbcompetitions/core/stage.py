"""Stages of a competition and their placeholder schedules."""

import logging
from typing import TYPE_CHECKING, Optional, Union

from vbcompetitions.core.group import Crossover, Group, GroupEntry, Knockout, MatchFilter, MatchType, TeamFilter
from vbcompetitions.core.league import League
from vbcompetitions.core.match import GroupBreak, IfUnknownMatch
from vbcompetitions.core.references import is_reference
from vbcompetitions.core.team import UNKNOWN_TEAM_ID
from vbcompetitions.exceptions import EntityNotFoundError, StructuralError
from vbcompetitions.models.competition import IfUnknownData, StageData
from vbcompetitions.models.group import GroupData
from vbcompetitions.models.match import BreakData

if TYPE_CHECKING:
    from vbcompetitions.core.competition import Competition

logger = logging.getLogger(__name__)

# Used to order entries that have no date or start time
DEFAULT_SORT_DATE = '2023-02-12'
DEFAULT_SORT_START = '10:00'


def create_group(stage: 'Stage', data: GroupData) -> Group:
    """Create an empty group of the right type for the group data."""
    match_type = MatchType(data.match_type)
    if data.type == 'league':
        return League(stage, data.id, match_type, data.draws_allowed)
    if data.type == 'crossover':
        return Crossover(stage, data.id, match_type)
    return Knockout(stage, data.id, match_type)


def _schedule_key(entry: Union[GroupEntry, IfUnknownMatch]) -> str:
    return (entry.date or DEFAULT_SORT_DATE) + (entry.start or DEFAULT_SORT_START)


class Stage:
    """An ordered phase of a competition, such as pools followed by finals.

    No team may play in more than one group of the same stage.
    """

    def __init__(self, competition: 'Competition', stage_id: str) -> None:
        if competition.has_stage(stage_id):
            raise StructuralError(f'Stage with ID "{stage_id}" already exists in the competition')
        self.competition = competition
        self.id = stage_id
        self.name: Optional[str] = None
        self.notes: Optional[str] = None
        self.description: Optional[list[str]] = None
        self.groups: list[Group] = []
        self._group_lookup: dict[str, Group] = {}
        self.if_unknown: Optional[IfUnknown] = None

    def load_from_data(self, data: StageData) -> 'Stage':
        """Load the stage's groups in document order.

        Each group is added to the stage before its matches load, so matches can refer
        to earlier matches in the same group and to earlier groups.

        Raises:
            StructuralError: If group IDs repeat or a team plays in two groups
        """
        self.name = data.name
        self.notes = data.notes
        self.description = data.description

        for group_data in data.groups:
            group = create_group(self, group_data)
            self.add_group(group)
            group.load_from_data(group_data)

        if data.if_unknown is not None:
            self.if_unknown = IfUnknown(self, data.if_unknown.description).load_from_data(data.if_unknown)

        self.check_matches()
        return self

    def add_group(self, group: Group) -> 'Stage':
        if group.id in self._group_lookup:
            raise StructuralError(
                f'Competition data failed validation. Groups in a Stage with duplicate IDs not allowed: {{{self.id}:{group.id}}}'
            )
        self.groups.append(group)
        self._group_lookup[group.id] = group
        return self

    def get_group(self, group_id: str) -> Group:
        """Get a group by ID.

        Raises:
            EntityNotFoundError: If the stage has no group with that ID
        """
        if group_id not in self._group_lookup:
            raise EntityNotFoundError(f'Group with ID {group_id} not found in stage with ID {self.id}')
        return self._group_lookup[group_id]

    def has_group(self, group_id: str) -> bool:
        return group_id in self._group_lookup

    def check_matches(self) -> None:
        """Check that no team plays in two different groups of this stage."""
        for i, group in enumerate(self.groups):
            these_ids = group.get_team_ids(TeamFilter.PLAYING)
            for other in self.groups[i + 1:]:
                those_ids = other.get_team_ids(TeamFilter.PLAYING)
                shared = [team_id for team_id in these_ids if team_id in those_ids]
                if shared:
                    raise StructuralError(
                        f'Groups in the same stage cannot contain the same team. '
                        f'Groups {{{self.id}:{group.id}}} and {{{self.id}:{other.id}}} '
                        f'both contain the following team IDs: "' + '", "'.join(shared) + '"'
                    )

    def get_matches(self, team_id: Optional[str] = None, flags: MatchFilter = MatchFilter(0)) -> list[GroupEntry]:
        """Get the matches in every group of the stage, ordered by date and start time."""
        if team_id is None or team_id == UNKNOWN_TEAM_ID or is_reference(team_id):
            entries = [entry for group in self.groups for entry in group.get_matches()]
        else:
            entries = [entry for group in self.groups for entry in group.get_matches(team_id, flags)]
        return sorted(entries, key=_schedule_key)

    def get_team_ids(self, flags: TeamFilter = TeamFilter.FIXED_ID) -> list[str]:
        team_ids: dict[str, None] = {}
        for group in self.groups:
            for team_id in group.get_team_ids(flags):
                team_ids[team_id] = None
        return list(team_ids)

    def is_complete(self) -> bool:
        return all(group.is_complete() for group in self.groups)

    def team_has_matches(self, team_id: str) -> bool:
        return any(group.team_has_matches(team_id) for group in self.groups)

    def team_has_officiating(self, team_id: str) -> bool:
        return any(group.team_has_officiating(team_id) for group in self.groups)

    def team_may_have_matches(self, team_id: str) -> bool:
        """Whether any incomplete group in the stage has a route for the team into its matches."""
        if self.is_complete():
            return False
        return any(group.team_may_have_matches(team_id) for group in self.groups)

    def get_match_dates(self, team_id: Optional[str] = None, flags: MatchFilter = MatchFilter.PLAYING) -> list[str]:
        dates: dict[str, None] = {}
        for group in self.groups:
            for date in group.get_match_dates(team_id, flags):
                dates[date] = None
        return sorted(dates)

    def get_matches_on_date(
        self,
        date: str,
        team_id: Optional[str] = None,
        flags: MatchFilter = MatchFilter.ALL,
    ) -> list[GroupEntry]:
        entries = [entry for group in self.groups for entry in group.get_matches_on_date(date, team_id, flags)]
        return sorted(entries, key=_schedule_key)

    def clear_caches(self) -> None:
        for group in self.groups:
            group.clear_caches()

    def to_dict(self) -> dict:
        stage = {'id': self.id}
        if self.name is not None:
            stage['name'] = self.name
        if self.notes is not None:
            stage['notes'] = self.notes
        if self.description is not None:
            stage['description'] = self.description
        stage['groups'] = [group.to_dict() for group in self.groups]
        if self.if_unknown is not None:
            stage['ifUnknown'] = self.if_unknown.to_dict()
        return stage


class IfUnknown:
    """A provisional schedule for a stage whose teams are not yet known."""

    def __init__(self, stage: Stage, description: list[str]) -> None:
        self.stage = stage
        self.description = description
        self.entries: list[Union[IfUnknownMatch, GroupBreak]] = []
        self._match_lookup: dict[str, IfUnknownMatch] = {}

    def load_from_data(self, data: IfUnknownData) -> 'IfUnknown':
        for entry in data.matches:
            if isinstance(entry, BreakData):
                self.entries.append(GroupBreak(self).load_from_data(entry))
            else:
                match = IfUnknownMatch(self, entry.id)
                match.load_from_data(entry)
                self.entries.append(match)
                self._match_lookup[match.id] = match
        return self

    @property
    def matches(self) -> list[IfUnknownMatch]:
        return [entry for entry in self.entries if isinstance(entry, IfUnknownMatch)]

    def has_match(self, match_id: str) -> bool:
        return match_id in self._match_lookup

    def get_match(self, match_id: str) -> IfUnknownMatch:
        if match_id not in self._match_lookup:
            raise EntityNotFoundError(f'Match with ID {match_id} not found')
        return self._match_lookup[match_id]

    def to_dict(self) -> dict:
        return {
            'description': self.description,
            'matches': [entry.to_dict() for entry in self.entries],
        }
