"""Teams entered in a competition."""

import re
from typing import TYPE_CHECKING, Optional

from vbcompetitions.exceptions import StructuralError
from vbcompetitions.models.competition import TeamContactData, TeamData

if TYPE_CHECKING:
    from vbcompetitions.core.club import Club
    from vbcompetitions.core.competition import Competition

UNKNOWN_TEAM_ID = 'UNKNOWN'
UNKNOWN_TEAM_NAME = 'UNKNOWN'

TEAM_ID_PATTERN = re.compile(r'^((?![":{}?=])[\x20-\x7F])+$')


class Team:
    """A team in a competition.

    Every competition also owns an UNKNOWN team, returned when a team reference
    cannot be resolved yet.
    """

    def __init__(self, competition: Optional['Competition'], team_id: str, name: str) -> None:
        if len(team_id) > 100 or len(team_id) < 1:
            raise StructuralError('Invalid team ID: must be between 1 and 100 characters long')
        if not TEAM_ID_PATTERN.match(team_id):
            raise StructuralError('Invalid team ID: must contain only ASCII printable characters excluding " : { } ? =')
        if competition is not None and competition.has_team(team_id):
            raise StructuralError(f'Team with ID "{team_id}" already exists in the competition')

        self.competition = competition
        self._id = team_id
        self.name = name
        self.notes: Optional[str] = None
        self.contacts: list[TeamContactData] = []
        self._club_id: Optional[str] = None

    def load_from_data(self, team_data: TeamData) -> 'Team':
        """Load notes, contacts and club membership.

        Raises:
            StructuralError: If two contacts share an ID or the club does not exist
        """
        for contact in team_data.contacts or []:
            self.add_contact(contact)
        if team_data.club is not None:
            self.set_club(team_data.club)
        self.notes = team_data.notes
        return self

    @classmethod
    def unknown(cls) -> 'Team':
        """Create the placeholder for a team that is not known yet."""
        return cls(None, UNKNOWN_TEAM_ID, UNKNOWN_TEAM_NAME)

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        if len(name) > 1000 or len(name) < 1:
            raise StructuralError('Invalid team name: must be between 1 and 1000 characters long')
        self._name = name

    @property
    def is_unknown(self) -> bool:
        return self._id == UNKNOWN_TEAM_ID

    @property
    def club_id(self) -> Optional[str]:
        return self._club_id

    @property
    def club(self) -> Optional['Club']:
        if self._club_id is None or self.competition is None:
            return None
        return self.competition.get_club(self._club_id)

    def set_club(self, club_id: Optional[str]) -> 'Team':
        """Move the team into a club, or out of any club when given None.

        Raises:
            StructuralError: If the competition has no club with that ID
        """
        if club_id is not None and (self.competition is None or not self.competition.has_club(club_id)):
            raise StructuralError(f'No club with ID "{club_id}" exists')
        self._club_id = club_id
        return self

    def add_contact(self, contact: TeamContactData) -> 'Team':
        if self.has_contact(contact.id):
            raise StructuralError('team contacts with duplicate IDs within a team not allowed')
        self.contacts.append(contact)
        return self

    def has_contact(self, contact_id: str) -> bool:
        return any(contact.id == contact_id for contact in self.contacts)

    def delete_contact(self, contact_id: str) -> 'Team':
        self.contacts = [contact for contact in self.contacts if contact.id != contact_id]
        return self

    def to_dict(self) -> dict:
        team = {'id': self._id, 'name': self._name}
        if self._club_id is not None:
            team['club'] = self._club_id
        if self.contacts:
            team['contacts'] = [contact.to_data() for contact in self.contacts]
        if self.notes is not None:
            team['notes'] = self.notes
        return team

    def __repr__(self) -> str:
        return f"Team(id={self._id!r}, name={self._name!r})"
