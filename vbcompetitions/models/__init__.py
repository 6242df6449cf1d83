"""Pydantic models describing the competition JSON document."""

from vbcompetitions.models.competition import (
    ClubContactData,
    ClubData,
    CompetitionDocument,
    ContactData,
    IfUnknownData,
    MetadataItem,
    StageData,
    TeamContactData,
    TeamData,
    validate_document,
)
from vbcompetitions.models.group import (
    GroupData,
    KnockoutConfig,
    KnockoutStanding,
    LeagueConfig,
    LeaguePoints,
    SetConfig,
)
from vbcompetitions.models.match import (
    BreakData,
    MatchData,
    MatchManagerTeam,
    MatchOfficials,
    MatchTeam,
)

__all__ = [
    "CompetitionDocument", "MetadataItem", "TeamData", "StageData", "IfUnknownData",
    "ClubData", "ContactData", "TeamContactData", "ClubContactData",
    "GroupData", "SetConfig", "LeagueConfig", "LeaguePoints", "KnockoutConfig", "KnockoutStanding",
    "MatchData", "BreakData", "MatchTeam", "MatchOfficials", "MatchManagerTeam",
    "validate_document",
]
