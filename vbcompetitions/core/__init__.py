"""The competition domain: teams, stages, groups, matches and league tables."""

from vbcompetitions.core.club import Club
from vbcompetitions.core.competition import Competition
from vbcompetitions.core.group import Crossover, Group, GroupType, Knockout, MatchFilter, MatchType, TeamFilter
from vbcompetitions.core.league import League, LeagueTable, LeagueTableEntry
from vbcompetitions.core.match import GroupBreak, GroupMatch, IfUnknownMatch
from vbcompetitions.core.references import TeamReferenceTable
from vbcompetitions.core.result import MatchResult
from vbcompetitions.core.stage import IfUnknown, Stage
from vbcompetitions.core.team import UNKNOWN_TEAM_ID, Team

__all__ = [
    "Competition", "Stage", "IfUnknown",
    "Group", "League", "Crossover", "Knockout", "GroupType", "MatchType", "TeamFilter", "MatchFilter",
    "GroupMatch", "GroupBreak", "IfUnknownMatch", "MatchResult",
    "LeagueTable", "LeagueTableEntry",
    "Team", "UNKNOWN_TEAM_ID", "Club", "TeamReferenceTable",
]
