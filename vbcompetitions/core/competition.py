"""The competition: teams, stages and the team reference table."""

import json
import logging
from typing import Any, Optional

from vbcompetitions import config
from vbcompetitions.core.club import Club
from vbcompetitions.core.group import MatchFilter, TeamFilter
from vbcompetitions.core.references import (
    LEAGUE_TYPE,
    LOOSE_REFERENCE_PATTERN,
    MATCH_LOSER,
    MATCH_WINNER,
    UNTERMINATED_REFERENCE_PATTERN,
    TeamReferenceTable,
    is_reference,
    parse_ternary,
    strip_team_references,
)
from vbcompetitions.core.stage import Stage
from vbcompetitions.core.team import Team
from vbcompetitions.exceptions import DocumentError, EntityNotFoundError, StructuralError
from vbcompetitions.models.competition import CompetitionDocument, validate_document

logger = logging.getLogger(__name__)


class Competition:
    """A whole competition loaded from a competition document.

    Load order is clubs, then teams, then stages in document order, then each
    stage's groups in document order, so references can only point backwards
    into what has already been loaded.
    """

    def __init__(self, name: str) -> None:
        self.version = config.SUPPORTED_VERSION
        self.name = name
        self.notes: Optional[str] = None
        self.clubs: list[Club] = []
        self._club_lookup: dict[str, Club] = {}
        self.teams: list[Team] = []
        self.stages: list[Stage] = []
        self._metadata: dict[str, str] = {}
        self._stage_lookup: dict[str, Stage] = {}
        self.unknown_team = Team.unknown()
        self.references = TeamReferenceTable(self.unknown_team)

    # =========================================================================
    # LOADING AND SAVING
    # =========================================================================

    @classmethod
    def load_from_json(cls, competition_json: str) -> 'Competition':
        """Load a competition from competition document JSON.

        Raises:
            DocumentError: If the JSON is invalid, the version is unsupported or the
                document fails schema validation
            StructuralError: If the document's entities are inconsistent
            ScoreError: If any match's scores break its group's scoring rules
        """
        try:
            data = json.loads(competition_json)
        except ValueError as err:
            raise DocumentError('Document does not contain valid JSON') from err
        return cls.load_from_data(data)

    @classmethod
    def load_from_data(cls, data: Any) -> 'Competition':
        """Load a competition from a parsed competition document."""
        document = cls.validate_data(data)

        competition = cls(document.name)
        competition.version = document.version
        for item in document.metadata or []:
            competition.set_metadata(item.key, item.value)
        competition.notes = document.notes
        for club_data in document.clubs or []:
            competition.add_club(Club(competition, club_data.id, club_data.name).load_from_data(club_data))

        for team_data in document.teams:
            competition.add_team(Team(competition, team_data.id, team_data.name).load_from_data(team_data))

        for stage_data in document.stages:
            stage = Stage(competition, stage_data.id)
            competition.add_stage(stage)
            stage.load_from_data(stage_data)

        logger.info(
            f"Loaded competition '{competition.name}' with {len(competition.teams)} teams "
            f"and {len(competition.stages)} stages"
        )
        return competition

    @staticmethod
    def validate_data(data: Any) -> CompetitionDocument:
        """Check the document version and schema.

        Raises:
            DocumentError: If the version is unsupported or the schema check fails
        """
        if isinstance(data, dict) and 'version' in data and data['version'] != config.SUPPORTED_VERSION:
            raise DocumentError(f"Document version {data['version']} not supported")
        return validate_document(data)

    def to_dict(self) -> dict:
        competition: dict[str, Any] = {'version': self.version}
        if self._metadata:
            competition['metadata'] = self.get_metadata()
        competition['name'] = self.name
        if self.notes is not None:
            competition['notes'] = self.notes
        if self.clubs:
            competition['clubs'] = [club.to_dict() for club in self.clubs]
        competition['teams'] = [team.to_dict() for team in self.teams]
        competition['stages'] = [stage.to_dict() for stage in self.stages]
        return competition

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    # =========================================================================
    # METADATA
    # =========================================================================

    def set_metadata(self, key: str, value: str) -> 'Competition':
        if len(key) > 100 or len(key) < 1:
            raise StructuralError('Invalid metadata key: must be between 1 and 100 characters long')
        if len(value) > 1000 or len(value) < 1:
            raise StructuralError('Invalid metadata value: must be between 1 and 1000 characters long')
        self._metadata[key] = value
        return self

    def has_metadata(self, key: str) -> bool:
        return key in self._metadata

    def get_metadata_by_key(self, key: str) -> Optional[str]:
        return self._metadata.get(key)

    def get_metadata(self) -> list[dict[str, str]]:
        return [{'key': key, 'value': value} for key, value in self._metadata.items()]

    def delete_metadata(self, key: str) -> 'Competition':
        self._metadata.pop(key, None)
        return self

    # =========================================================================
    # CLUBS
    # =========================================================================

    def add_club(self, club: Club) -> 'Competition':
        if club.competition is not self:
            raise StructuralError('Club was initialised with a different Competition')
        self.clubs.append(club)
        self._club_lookup[club.id] = club
        return self

    def has_club(self, club_id: str) -> bool:
        return club_id in self._club_lookup

    def get_club(self, club_id: str) -> Club:
        """Get a club by ID.

        Raises:
            EntityNotFoundError: If there is no club with that ID
        """
        if club_id not in self._club_lookup:
            raise EntityNotFoundError(f'Club with ID "{club_id}" not found')
        return self._club_lookup[club_id]

    def delete_club(self, club_id: str) -> 'Competition':
        """Remove a club that no team belongs to.

        Raises:
            StructuralError: If any team still names the club
        """
        if not self.has_club(club_id):
            return self
        teams = self._club_lookup[club_id].get_teams()
        if teams:
            team_ids = ', '.join(f'{{{team.id}}}' for team in teams)
            raise StructuralError(f'Club still contains teams with IDs: {team_ids}')
        self.clubs = [club for club in self.clubs if club.id != club_id]
        del self._club_lookup[club_id]
        return self

    # =========================================================================
    # TEAMS
    # =========================================================================

    def add_team(self, team: Team) -> 'Competition':
        if team.competition is not self:
            raise StructuralError('Team was initialised with a different Competition')
        if self.has_team(team.id):
            return self
        self.teams.append(team)
        self.references.add_team(team)
        return self

    def has_team(self, team_id: str) -> bool:
        return self.references.has_team(team_id)

    def get_team(self, team_id: str) -> Team:
        """Find the team for a team ID, reference or ternary.

        Never raises; returns the UNKNOWN team when the team is not known yet.
        """
        return self.references.resolve(team_id)

    def delete_team(self, team_id: str) -> 'Competition':
        """Remove a team that has no matches.

        Raises:
            StructuralError: If the team still plays in or officiates any match
        """
        if not self.has_team(team_id):
            return self

        team_matches = []
        for stage in self.stages:
            for match in stage.get_matches(team_id, MatchFilter.PLAYING | MatchFilter.OFFICIATING):
                team_matches.append(f'{{{stage.id}:{match.group.id}:{match.id}}}')
        if team_matches:
            raise StructuralError('Team still has matches with IDs: ' + ', '.join(team_matches))

        self.teams = [team for team in self.teams if team.id != team_id]
        self.references.remove_team(team_id)
        return self

    def add_team_reference(self, key: str, team: Team) -> 'Competition':
        """Record that a team reference now resolves to a team.

        Raises:
            StructuralError: If the reference already resolves to a different team
        """
        self.references.add_reference(key, team)
        return self

    # =========================================================================
    # STAGES
    # =========================================================================

    def add_stage(self, stage: Stage) -> 'Competition':
        if stage.competition is not self:
            raise StructuralError('Stage was initialised with a different Competition')
        self.stages.append(stage)
        self._stage_lookup[stage.id] = stage
        return self

    def has_stage(self, stage_id: str) -> bool:
        return stage_id in self._stage_lookup

    def get_stage(self, stage_id: str) -> Stage:
        """Get a stage by ID.

        Raises:
            EntityNotFoundError: If there is no stage with that ID
        """
        if stage_id not in self._stage_lookup:
            raise EntityNotFoundError(f'Stage with ID {stage_id} not found')
        return self._stage_lookup[stage_id]

    def delete_stage(self, stage_id: str) -> 'Competition':
        """Remove a stage that no later stage refers to.

        Raises:
            StructuralError: If a match in a later stage refers to the stage
        """
        if not self.has_stage(stage_id):
            return self

        stage_found = False
        for stage in self.stages:
            if stage.id == stage_id:
                stage_found = True
                continue
            if not stage_found:
                continue
            for group in stage.groups:
                for match in group.matches:
                    references = strip_team_references(match.home_team.id) + strip_team_references(match.away_team.id)
                    if match.officials_team_id is not None:
                        references += strip_team_references(match.officials_team_id)
                    for reference in references:
                        if reference[1:].split(':', 1)[0] == stage_id:
                            raise StructuralError(
                                f'Cannot delete stage with id "{stage_id}" as it is referenced in match '
                                f'{{{stage.id}:{group.id}:{match.id}}}'
                            )

        self.stages = [stage for stage in self.stages if stage.id != stage_id]
        del self._stage_lookup[stage_id]
        self.process_results()
        return self

    def is_complete(self) -> bool:
        return all(stage.is_complete() for stage in self.stages)

    def process_results(self) -> None:
        """Rebuild the team references from current results.

        Called after scores change, since a new result can change who every later
        reference resolves to.
        """
        self.references.clear_references()
        for stage in self.stages:
            stage.clear_caches()
        for stage in self.stages:
            for group in stage.groups:
                group.process_matches()
        logger.debug(f"Reprocessed results for competition '{self.name}'")

    # =========================================================================
    # TEAM ID VALIDATION
    # =========================================================================

    def validate_team_id(self, team_id: str, match_id: str, field: str) -> None:
        """Check a team identifier used in a match.

        Args:
            team_id: Literal team ID, reference or ternary
            match_id: The match using the identifier, for error messages
            field: Which match field holds the identifier, for error messages

        Raises:
            StructuralError: If the identifier is malformed or points at something that
                does not exist
        """
        where = f'for {field} in match with ID "{match_id}"'

        if not is_reference(team_id):
            try:
                self._validate_team_exists(team_id)
            except StructuralError as err:
                raise StructuralError(f'Invalid team ID {where}') from err
            return

        ternary = parse_ternary(team_id)
        if ternary is not None:
            self._validate_ternary_part(ternary.left, f'Invalid ternary left part reference {where}', False)
            self._validate_ternary_part(ternary.right, f'Invalid ternary right part reference {where}', False)
            self._validate_ternary_part(
                ternary.true_branch, f'Invalid ternary true team reference {where}', not ternary.true_is_reference
            )
            self._validate_ternary_part(
                ternary.false_branch, f'Invalid ternary false team reference {where}', not is_reference(ternary.false_branch)
            )
            return

        if UNTERMINATED_REFERENCE_PATTERN.match(team_id) or '==' in team_id:
            raise StructuralError(f'Invalid team reference {where}: "{team_id}"')

        self._validate_team_reference(team_id)

    def _validate_ternary_part(self, part: str, message: str, literal: bool) -> None:
        try:
            if literal:
                self._validate_team_exists(part)
            else:
                self._validate_team_reference(part)
        except StructuralError as err:
            raise StructuralError(f'{message}: "{part}"') from err

    def _validate_team_exists(self, team_id: str) -> None:
        if not self.has_team(team_id):
            raise StructuralError(f'Team with ID "{team_id}" does not exist')

    def _validate_team_reference(self, team_ref: str) -> None:
        parts = LOOSE_REFERENCE_PATTERN.match(team_ref)
        if parts is None:
            raise StructuralError(
                f'Invalid team reference format "{team_ref}", '
                f'must be "{{STAGE-ID:GROUP-ID:TYPE-INDICATOR:ENTITY-INDICATOR}}"'
            )
        stage_id, group_id, ref_type, entity = parts.groups()

        if not self.has_stage(stage_id):
            raise StructuralError(f'Invalid Stage part: Stage with ID "{stage_id}" does not exist')
        stage = self.get_stage(stage_id)

        if not stage.has_group(group_id):
            raise StructuralError(
                f'Invalid Group part: Group with ID "{group_id}" does not exist in stage with ID "{stage_id}"'
            )
        group = stage.get_group(group_id)

        if ref_type == LEAGUE_TYPE:
            try:
                position = int(entity)
            except ValueError as err:
                raise StructuralError('Invalid League position: reference must be an integer') from err
            if str(position) != entity:
                raise StructuralError('Invalid League position: reference must be an integer')
            if position < 1:
                raise StructuralError('Invalid League position: reference must be a positive integer')
            if group.is_complete() and len(group.get_team_ids(TeamFilter.KNOWN)) < position:
                raise StructuralError('Invalid League position: position is bigger than the number of teams')
            return

        if not group.has_match(ref_type):
            raise StructuralError(
                f'Invalid Match part in reference {team_ref} : Match with ID "{ref_type}" does not exist '
                f'in stage:group with IDs "{stage_id}:{group_id}"'
            )
        if entity not in (MATCH_WINNER, MATCH_LOSER):
            raise StructuralError(
                f'Invalid Match result in reference {team_ref}: reference must be one of "winner"|"loser" '
                f'in stage:group:match with IDs "{stage_id}:{group_id}:{ref_type}"'
            )
