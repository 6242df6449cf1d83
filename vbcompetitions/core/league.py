"""League groups and their tables."""

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import TYPE_CHECKING, Callable, Optional

from vbcompetitions.core.group import Group, GroupType, MatchType
from vbcompetitions.core.match import GroupMatch
from vbcompetitions.core.references import league_reference
from vbcompetitions.models.group import GroupData, LeagueConfig

if TYPE_CHECKING:
    from vbcompetitions.core.stage import Stage

logger = logging.getLogger(__name__)


@dataclass
class LeagueTableEntry:
    """One team's line in a league table.

    ``h2h`` maps opponent team IDs to this team's wins against them.
    """

    team_id: str
    team: str
    played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    sf: int = 0
    sa: int = 0
    sd: int = 0
    pf: int = 0
    pa: int = 0
    pd: int = 0
    bp: int = 0
    pp: int = 0
    pts: int = 0
    h2h: dict[str, int] = field(default_factory=dict)


def _compare_head_to_head(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    if a.team_id not in b.h2h or b.team_id not in a.h2h:
        return 0
    return b.h2h[a.team_id] - a.h2h[b.team_id]


# Negative when ``a`` ranks above ``b``
COMPARATORS: dict[str, Callable[[LeagueTableEntry, LeagueTableEntry], int]] = {
    'PTS': lambda a, b: b.pts - a.pts,
    'WINS': lambda a, b: b.wins - a.wins,
    'LOSSES': lambda a, b: b.losses - a.losses,
    'H2H': _compare_head_to_head,
    'PF': lambda a, b: b.pf - a.pf,
    'PA': lambda a, b: a.pa - b.pa,
    'PD': lambda a, b: b.pd - a.pd,
    'SF': lambda a, b: b.sf - a.sf,
    'SA': lambda a, b: a.sa - b.sa,
    'SD': lambda a, b: b.sd - a.sd,
    'BP': lambda a, b: b.bp - a.bp,
    'PP': lambda a, b: a.pp - b.pp,
}

ORDERING_NAMES = {
    'PTS': 'points',
    'WINS': 'wins',
    'LOSSES': 'losses',
    'H2H': 'head-to-head',
    'PF': 'points for',
    'PA': 'points against',
    'PD': 'points difference',
    'SF': 'sets for',
    'SA': 'sets against',
    'SD': 'sets difference',
    'BP': 'bonus points',
    'PP': 'penalty points',
}


class LeagueTable:
    """The ordered standings for a league."""

    def __init__(self, league: 'League') -> None:
        self.league = league
        self.entries: list[LeagueTableEntry] = []

    @property
    def group_id(self) -> str:
        return self.league.id

    @property
    def has_draws(self) -> bool:
        return self.league.draws_allowed

    @property
    def has_sets(self) -> bool:
        return self.league.match_type is MatchType.SETS

    @property
    def ordering(self) -> list[str]:
        return list(self.league.league_config.ordering)

    def get_ordering_text(self) -> str:
        """Describe how positions are decided, e.g. "Position is decided by points, then wins"."""
        names = [ORDERING_NAMES[criterion] for criterion in self.ordering]
        return 'Position is decided by ' + ', then '.join(names)

    def get_scoring_text(self) -> str:
        """Describe how league points are awarded, or an empty string if none are."""
        points = self.league.league_config.points

        def describe(value: int, action: str) -> str:
            return f'1 point per {action}' if value == 1 else f'{value} points per {action}'

        phrases = []
        if points.played != 0:
            phrases.append(describe(points.played, 'played'))
        if points.win != 0:
            phrases.append(describe(points.win, 'win'))
        if points.per_set != 0:
            phrases.append(describe(points.per_set, 'set'))
        if points.win_by_one != 0 and points.win != points.win_by_one:
            phrases.append(describe(points.win_by_one, 'win by one set'))
        if points.lose != 0:
            phrases.append(describe(points.lose, 'loss'))
        if points.lose_by_one != 0 and points.win != points.lose_by_one:
            phrases.append(describe(points.lose_by_one, 'loss by one set'))
        if points.forfeit != 0:
            phrases.append(describe(points.forfeit, 'forfeited match'))

        if not phrases:
            return ''
        if len(phrases) == 1:
            return 'Teams win ' + phrases[0]
        return 'Teams win ' + ', '.join(phrases[:-1]) + ' and ' + phrases[-1]


class League(Group):
    """A round robin where every completed match feeds the league table."""

    group_type = GroupType.LEAGUE

    def __init__(self, stage: 'Stage', group_id: str, match_type: MatchType, draws_allowed: Optional[bool] = None) -> None:
        super().__init__(stage, group_id, match_type)
        self.draws_allowed_setting = draws_allowed
        self.league_config = LeagueConfig(ordering=['PTS'])
        self.table = LeagueTable(self)

    @property
    def draws_allowed(self) -> bool:
        return bool(self.draws_allowed_setting)

    def _load_config(self, data: GroupData) -> None:
        self.league_config = data.league
        self.draws_allowed_setting = data.draws_allowed

    def _config_to_dict(self) -> dict:
        config = {'league': self.league_config.to_data()}
        if self.draws_allowed_setting is not None:
            config['drawsAllowed'] = self.draws_allowed_setting
        return config

    def process_matches(self) -> None:
        """Register match results, build the table and, once complete, the final positions."""
        super().process_matches()
        self.table = self._calculate_table()

        if self.is_complete():
            competition = self.competition
            for position, entry in enumerate(self.table.entries, start=1):
                team = competition.get_team(entry.team_id)
                if not team.is_unknown:
                    competition.add_team_reference(league_reference(self.stage.id, self.id, position), team)

    def get_league_table(self) -> LeagueTable:
        return self.table

    def _calculate_table(self) -> LeagueTable:
        table = LeagueTable(self)
        points = self.league_config.points
        competition = self.competition
        results: dict[str, LeagueTableEntry] = {}

        for match in self.matches:
            if match.is_friendly or not match.is_complete():
                continue

            home_id = match.home_team.id
            away_id = match.away_team.id
            for team_id in (home_id, away_id):
                if team_id not in results:
                    results[team_id] = LeagueTableEntry(team_id, competition.get_team(team_id).name)
            home = results[home_id]
            away = results[away_id]

            home.played += 1
            away.played += 1

            winner: Optional[LeagueTableEntry] = None
            loser: Optional[LeagueTableEntry] = None
            if match.is_draw():
                home.draws += 1
                away.draws += 1
                home.h2h.setdefault(away_id, 0)
                away.h2h.setdefault(home_id, 0)
            elif match.result.decided:
                winner = results[match.get_winner_team_id()]
                loser = results[match.get_loser_team_id()]
                winner.wins += 1
                loser.losses += 1
                winner.h2h[loser.team_id] = winner.h2h.get(loser.team_id, 0) + 1
                loser.h2h.setdefault(winner.team_id, 0)

            if table.has_sets:
                self._add_set_scores(match, home, away)
                home.pts += points.per_set * match.home_team_sets
                away.pts += points.per_set * match.away_team_sets
                if winner is not None:
                    if abs(match.home_team_sets - match.away_team_sets) == 1:
                        winner.pts += points.win_by_one
                        loser.pts += points.lose_by_one
                    else:
                        winner.pts += points.win
                        loser.pts += points.lose
            else:
                if match.home_team.scores:
                    home.pf += match.home_team.scores[0]
                    home.pa += match.away_team.scores[0]
                    away.pf += match.away_team.scores[0]
                    away.pa += match.home_team.scores[0]
                if winner is not None:
                    winner.pts += points.win
                    loser.pts += points.lose

            if match.home_team.forfeit:
                home.pts -= points.forfeit
            if match.away_team.forfeit:
                away.pts -= points.forfeit
            home.bp += match.home_team.bonus_points
            home.pp += match.home_team.penalty_points
            away.bp += match.away_team.bonus_points
            away.pp += match.away_team.penalty_points

        for entry in results.values():
            entry.pd = entry.pf - entry.pa
            entry.sd = entry.sf - entry.sa
            entry.pts += entry.played * points.played + entry.bp - entry.pp
            table.entries.append(entry)

        table.entries.sort(key=cmp_to_key(self._compare_entries))
        logger.debug(f"Calculated league table for {self.tag} with {len(table.entries)} teams")
        return table

    def _add_set_scores(self, match: GroupMatch, home: LeagueTableEntry, away: LeagueTableEntry) -> None:
        min_points = self.set_config.min_points
        for home_score, away_score in zip(match.home_team.scores, match.away_team.scores):
            if home_score < min_points and away_score < min_points:
                continue
            home.pf += home_score
            home.pa += away_score
            away.pf += away_score
            away.pa += home_score
        home.sf += match.home_team_sets
        home.sa += match.away_team_sets
        away.sf += match.away_team_sets
        away.sa += match.home_team_sets

    def _compare_entries(self, a: LeagueTableEntry, b: LeagueTableEntry) -> int:
        for criterion in self.league_config.ordering:
            result = COMPARATORS[criterion](a, b)
            if result != 0:
                return result
        return (a.team > b.team) - (a.team < b.team)
