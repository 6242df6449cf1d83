"""Team references and the table that resolves them.

A team identifier in a match is one of:

- a literal team ID, e.g. ``TM1``
- a reference to the outcome of another group, e.g. ``{L:RR:league:1}`` or
  ``{KO:CUP:SF1:winner}``
- a ternary over two references, e.g. ``{L:A:league:1}=={L:B:league:1}?{L:A:league:2}:{L:B:league:1}``
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from vbcompetitions.core.team import Team
from vbcompetitions.exceptions import StructuralError

logger = logging.getLogger(__name__)

REFERENCE_PATTERN = re.compile(r'^\{([^:]*):([^:]*):([^:]*):([^:]*)\}$')
LOOSE_REFERENCE_PATTERN = re.compile(r'^\{([^:]*):([^:]*):([^:]*):(.*)\}$')
UNTERMINATED_REFERENCE_PATTERN = re.compile(r'^\{[^}]*$')
TERNARY_PATTERN = re.compile(r'^([^=]*)==([^?]*)\?(.*)$')
REFERENCE_BRANCHES_PATTERN = re.compile(r'^(\{[^}]*\}):(.*)$')
LITERAL_BRANCHES_PATTERN = re.compile(r'^([^:]*):(.*)$')

MATCH_WINNER = 'winner'
MATCH_LOSER = 'loser'
LEAGUE_TYPE = 'league'


@dataclass
class Ternary:
    """A parsed ``LEFT==RIGHT?TRUE:FALSE`` expression."""

    left: str
    right: str
    true_branch: str
    false_branch: str
    true_is_reference: bool


def is_reference(team_id: str) -> bool:
    """Whether the identifier is a reference (or ternary) rather than a literal team ID."""
    return team_id.startswith('{')


def parse_ternary(team_id: str) -> Optional[Ternary]:
    """Split a ternary expression into its parts.

    Returns:
        The parsed ternary, or None if the identifier is not a well formed ternary
    """
    lr_match = TERNARY_PATTERN.match(team_id)
    if lr_match is None:
        return None
    left, right, branches = lr_match.groups()

    tf_match = REFERENCE_BRANCHES_PATTERN.match(branches)
    if tf_match is not None:
        return Ternary(left, right, tf_match.group(1), tf_match.group(2), True)

    tf_match = LITERAL_BRANCHES_PATTERN.match(branches)
    if tf_match is not None:
        return Ternary(left, right, tf_match.group(1), tf_match.group(2), False)

    return None


def split_reference(team_ref: str) -> Optional[tuple[str, str, str, str]]:
    """Split ``{STAGE:GROUP:TYPE:ENTITY}`` into its four parts, or None if malformed."""
    parts = REFERENCE_PATTERN.match(team_ref)
    if parts is None:
        return None
    return parts.group(1), parts.group(2), parts.group(3), parts.group(4)


def referenced_stage_and_group(team_id: str) -> Optional[tuple[str, str]]:
    """The ``(stage, group)`` a reference points into, or None for a literal team ID."""
    if not is_reference(team_id):
        return None
    parts = team_id[1:].split(':', 2)
    if len(parts) > 2:
        return parts[0], parts[1]
    return None


def strip_team_references(team_id: str) -> list[str]:
    """List the plain references used in a team identifier.

    Literal IDs contribute nothing, a ternary contributes its left and right
    parts and any branch that is itself a reference.
    """
    if not is_reference(team_id):
        return []

    ternary = parse_ternary(team_id)
    if ternary is None:
        return [team_id]

    references = []
    for part in (ternary.left, ternary.right, ternary.true_branch, ternary.false_branch):
        for reference in strip_team_references(part):
            if reference not in references:
                references.append(reference)
    return references


def match_reference(stage_id: str, group_id: str, match_id: str, entity: str) -> str:
    return f'{{{stage_id}:{group_id}:{match_id}:{entity}}}'


def league_reference(stage_id: str, group_id: str, position: int) -> str:
    return f'{{{stage_id}:{group_id}:{LEAGUE_TYPE}:{position}}}'


class TeamReferenceTable:
    """Maps literal team IDs and resolved references to teams.

    The table starts with the competition's teams and grows as match results and
    final league positions become known. Looking up anything that has not been
    registered gives the UNKNOWN team.
    """

    def __init__(self, unknown_team: Team) -> None:
        self.unknown_team = unknown_team
        self._teams: dict[str, Team] = {}
        self._references: dict[str, Team] = {}

    def add_team(self, team: Team) -> None:
        self._teams[team.id] = team

    def remove_team(self, team_id: str) -> None:
        self._teams.pop(team_id, None)

    def has_team(self, team_id: str) -> bool:
        return team_id in self._teams

    def add_reference(self, key: str, team: Team) -> None:
        """Bind a reference to the team it resolves to.

        Binding a key again to the same team does nothing.

        Raises:
            StructuralError: If the key already resolves to a different team
        """
        existing = self._references.get(key)
        if existing is not None:
            if existing.id != team.id:
                raise StructuralError(
                    f'Team reference {key} already resolves to team "{existing.id}", '
                    f'cannot also resolve to team "{team.id}"'
                )
            return
        logger.debug(f"Team reference {key} resolves to {team.id}")
        self._references[key] = team

    def has_reference(self, key: str) -> bool:
        return key in self._references

    def clear_references(self) -> None:
        """Forget all resolved references, keeping the literal team IDs."""
        self._references.clear()

    def resolve(self, team_id: str) -> Team:
        """Find the team for a literal ID, reference or ternary.

        Never raises; anything that cannot be resolved yet gives the UNKNOWN team.
        """
        if not is_reference(team_id):
            return self._teams.get(team_id, self.unknown_team)

        if team_id in self._references:
            return self._references[team_id]

        ternary = parse_ternary(team_id)
        if ternary is not None:
            left = self.resolve(ternary.left)
            right = self.resolve(ternary.right)
            if left.is_unknown or right.is_unknown:
                return self.unknown_team
            if left.id == right.id:
                return self.resolve(ternary.true_branch)
            return self.resolve(ternary.false_branch)

        return self.unknown_team
