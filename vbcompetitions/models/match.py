"""Match, break and match-participant document models."""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field, StrictBool, StrictInt, model_validator

from vbcompetitions.models.base import (
    DATE_PATTERN,
    DURATION_PATTERN,
    ID_PATTERN,
    TIME_PATTERN,
    DocumentModel,
)

Score = Annotated[StrictInt, Field(ge=0)]
Name = Annotated[str, Field(min_length=1, max_length=1000)]


class MatchTeam(DocumentModel):
    """One side of a match: the team (or team reference) and its scores."""

    id: str = Field(..., min_length=1, max_length=1000)
    scores: list[Score]
    mvp: Optional[Name] = None
    forfeit: StrictBool = False
    bonus_points: StrictInt = Field(0, alias="bonusPoints", ge=0)
    penalty_points: StrictInt = Field(0, alias="penaltyPoints", ge=0)
    notes: Optional[str] = None
    players: Optional[list[Name]] = None


class MatchOfficials(DocumentModel):
    """Officials for a match, either a whole team or named individuals."""

    team: Optional[str] = Field(None, min_length=1, max_length=1000)
    first: Optional[Name] = None
    second: Optional[Name] = None
    challenge: Optional[Name] = None
    assistant_challenge: Optional[Name] = Field(None, alias="assistantChallenge")
    reserve: Optional[Name] = None
    scorer: Optional[Name] = None
    assistant_scorer: Optional[Name] = Field(None, alias="assistantScorer")
    linespersons: Optional[list[Name]] = None
    ball_crew: Optional[list[Name]] = Field(None, alias="ballCrew")

    @model_validator(mode='after')
    def check_team_or_person(self) -> 'MatchOfficials':
        people = self.model_fields_set - {'team'}
        if self.team is not None and people:
            raise ValueError('Match Officials must be either a team or a person')
        if self.team is None and self.first is None:
            raise ValueError('Match Officials must be either a team or a person')
        return self

    @property
    def is_team(self) -> bool:
        return self.team is not None


class MatchManagerTeam(DocumentModel):
    """A match manager provided by a team."""

    team: str = Field(..., min_length=1, max_length=1000)


class MatchData(DocumentModel):
    """A match in a group or in an ifUnknown block."""

    id: str = Field(..., min_length=1, max_length=100, pattern=ID_PATTERN)
    type: Literal['match'] = 'match'
    court: Optional[str] = Field(None, min_length=1, max_length=1000)
    venue: Optional[str] = Field(None, min_length=1, max_length=10000)
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    warmup: Optional[str] = Field(None, pattern=TIME_PATTERN)
    start: Optional[str] = Field(None, pattern=TIME_PATTERN)
    duration: Optional[str] = Field(None, pattern=DURATION_PATTERN)
    complete: Optional[StrictBool] = None
    home_team: MatchTeam = Field(..., alias="homeTeam")
    away_team: MatchTeam = Field(..., alias="awayTeam")
    officials: Optional[MatchOfficials] = None
    mvp: Optional[Name] = None
    manager: Optional[Union[MatchManagerTeam, Name]] = None
    friendly: Optional[StrictBool] = None
    notes: Optional[str] = None


class BreakData(DocumentModel):
    """A break in the schedule of a group, such as lunch or a presentation."""

    type: Literal['break'] = 'break'
    start: Optional[str] = Field(None, pattern=TIME_PATTERN)
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    duration: Optional[str] = Field(None, pattern=DURATION_PATTERN)
    name: Optional[Name] = None


GroupEntryData = Annotated[Union[MatchData, BreakData], Field(discriminator='type')]
