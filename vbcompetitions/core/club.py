"""Clubs that teams in a competition can belong to."""

from typing import TYPE_CHECKING, Optional

from vbcompetitions.core.team import TEAM_ID_PATTERN, Team
from vbcompetitions.exceptions import StructuralError
from vbcompetitions.models.competition import ClubContactData, ClubData

if TYPE_CHECKING:
    from vbcompetitions.core.competition import Competition


class Club:
    """A club in a competition.

    Teams name their club by ID; the club's teams are looked up from the
    competition rather than stored twice.
    """

    def __init__(self, competition: 'Competition', club_id: str, name: str) -> None:
        if len(club_id) > 100 or len(club_id) < 1:
            raise StructuralError('Invalid club ID: must be between 1 and 100 characters long')
        if not TEAM_ID_PATTERN.match(club_id):
            raise StructuralError('Invalid club ID: must contain only ASCII printable characters excluding " : { } ? =')
        if competition.has_club(club_id):
            raise StructuralError(f'Club with ID "{club_id}" already exists in the competition')

        self.competition = competition
        self._id = club_id
        self.name = name
        self.notes: Optional[str] = None
        self.contacts: list[ClubContactData] = []

    def load_from_data(self, club_data: ClubData) -> 'Club':
        for contact in club_data.contacts or []:
            self.add_contact(contact)
        self.notes = club_data.notes
        return self

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        if len(name) > 1000 or len(name) < 1:
            raise StructuralError('Invalid club name: must be between 1 and 1000 characters long')
        self._name = name

    def add_contact(self, contact: ClubContactData) -> 'Club':
        """Add a contact to the club.

        Raises:
            StructuralError: If the club already has a contact with the same ID
        """
        if self.has_contact(contact.id):
            raise StructuralError('club contacts with duplicate IDs within a club not allowed')
        self.contacts.append(contact)
        return self

    def has_contact(self, contact_id: str) -> bool:
        return any(contact.id == contact_id for contact in self.contacts)

    def delete_contact(self, contact_id: str) -> 'Club':
        self.contacts = [contact for contact in self.contacts if contact.id != contact_id]
        return self

    def get_teams(self) -> list[Team]:
        return [team for team in self.competition.teams if team.club_id == self._id]

    def has_team(self, team_id: str) -> bool:
        return any(team.id == team_id for team in self.get_teams())

    def to_dict(self) -> dict:
        club = {'id': self._id, 'name': self._name}
        if self.notes is not None:
            club['notes'] = self.notes
        if self.contacts:
            club['contacts'] = [contact.to_data() for contact in self.contacts]
        return club

    def __repr__(self) -> str:
        return f"Club(id={self._id!r}, name={self._name!r})"
