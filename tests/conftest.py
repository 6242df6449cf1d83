"""
Shared test fixtures and configuration.

Provides reusable competition documents, a match builder and temporary data
directories for the storage tests.
"""

import json
import os
import shutil
import tempfile
from typing import Any, Callable, Dict, List, Optional

import pytest

from vbcompetitions import Competition
from vbcompetitions.storage import reset_store


def build_match(
    match_id: str,
    home: str,
    away: str,
    home_scores: Optional[List[int]] = None,
    away_scores: Optional[List[int]] = None,
    **fields: Any,
) -> Dict[str, Any]:
    """Build a match document entry."""
    match = {
        'id': match_id,
        'type': 'match',
        'homeTeam': {'id': home, 'scores': home_scores or []},
        'awayTeam': {'id': away, 'scores': away_scores or []},
    }
    match.update(fields)
    return match


TEAMS = [
    {'id': 'TM1', 'name': 'Alpha'},
    {'id': 'TM2', 'name': 'Bravo'},
    {'id': 'TM3', 'name': 'Charlie'},
    {'id': 'TM4', 'name': 'Delta'},
]


# =============================================================================
# DOCUMENT FIXTURES
# =============================================================================

@pytest.fixture
def make_match() -> Callable[..., Dict[str, Any]]:
    """Provide the match document builder."""
    return build_match


@pytest.fixture
def league_data() -> Dict[str, Any]:
    """
    A complete sets league followed by a final between the top two.

    Final table: TM1 (5 pts), TM3 (4 pts), TM2 (3 pts), TM4 (0 pts).
    """
    return {
        'version': '1.0.0',
        'metadata': [{'key': 'season', 'value': '2024'}],
        'name': 'Test League',
        'teams': [dict(team) for team in TEAMS],
        'stages': [
            {
                'id': 'L',
                'name': 'League',
                'groups': [
                    {
                        'id': 'RR',
                        'name': 'Round robin',
                        'type': 'league',
                        'matchType': 'sets',
                        'league': {
                            'ordering': ['PTS', 'SD'],
                            'points': {'win': 3, 'winByOne': 2, 'lose': 0, 'loseByOne': 1},
                        },
                        'matches': [
                            build_match(
                                'M1', 'TM1', 'TM2', [25, 25, 25], [20, 18, 15],
                                date='2024-03-02', venue='Sports Hall', court='1',
                                warmup='09:00', start='09:20', duration='1:00', complete=True,
                                officials={'team': 'TM4'},
                            ),
                            build_match(
                                'M2', 'TM3', 'TM4', [25, 20, 25, 25], [20, 25, 15, 18],
                                date='2024-03-02', venue='Sports Hall', court='2',
                                warmup='09:00', start='09:20', duration='1:00', complete=True,
                                officials={'first': 'Pat Jones', 'scorer': 'Sam Smith'},
                            ),
                            {'type': 'break', 'date': '2024-03-02', 'start': '10:20', 'name': 'Lunch'},
                            build_match(
                                'M3', 'TM1', 'TM3', [25, 23, 25, 20, 15], [20, 25, 18, 25, 10],
                                date='2024-03-02', venue='Sports Hall', court='1',
                                warmup='10:50', start='11:10', duration='1:30', complete=True,
                            ),
                            build_match(
                                'M4', 'TM2', 'TM4', [25, 25, 25], [10, 10, 10],
                                date='2024-03-09', venue='Town Arena', start='10:00',
                            ),
                        ],
                    },
                ],
            },
            {
                'id': 'KO',
                'name': 'Finals',
                'groups': [
                    {
                        'id': 'F',
                        'type': 'crossover',
                        'matchType': 'sets',
                        'matches': [
                            build_match(
                                'FIN', '{L:RR:league:1}', '{L:RR:league:2}',
                                date='2024-03-16', venue='Sports Hall', warmup='14:00',
                                officials={'team': '{L:RR:league:3}'},
                            ),
                        ],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def continuous_data() -> Dict[str, Any]:
    """
    An unfinished continuously scored league that allows draws.

    C1 is a TM1 win, C2 a draw and C3 not yet played.
    """
    return {
        'version': '1.0.0',
        'name': 'Continuous League',
        'teams': [dict(team) for team in TEAMS],
        'stages': [
            {
                'id': 'S',
                'groups': [
                    {
                        'id': 'L',
                        'type': 'league',
                        'matchType': 'continuous',
                        'drawsAllowed': True,
                        'league': {'ordering': ['PTS', 'PD'], 'points': {'win': 3, 'lose': 0}},
                        'matches': [
                            build_match('C1', 'TM1', 'TM2', [30], [20], complete=True, date='2024-05-01'),
                            build_match('C2', 'TM3', 'TM4', [25], [25], complete=True, date='2024-05-01'),
                            build_match('C3', 'TM1', 'TM3', complete=False, date='2024-05-08'),
                        ],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def knockout_data() -> Dict[str, Any]:
    """
    A pool still in progress feeding a knockout with a ternary third place playoff.

    TM4 is entered in the competition but plays no matches.
    """
    return {
        'version': '1.0.0',
        'name': 'Cup',
        'teams': [dict(team) for team in TEAMS],
        'stages': [
            {
                'id': 'P',
                'groups': [
                    {
                        'id': 'A',
                        'type': 'league',
                        'matchType': 'sets',
                        'sets': {'maxSets': 3, 'setsToWin': 2},
                        'league': {'ordering': ['PTS', 'H2H']},
                        'matches': [
                            build_match('PA1', 'TM1', 'TM2', [25, 25], [20, 20], date='2024-06-01'),
                            build_match('PA2', 'TM2', 'TM3', [25, 25], [15, 15], date='2024-06-01'),
                            build_match('PA3', 'TM3', 'TM1', date='2024-06-01'),
                        ],
                    },
                ],
            },
            {
                'id': 'K',
                'groups': [
                    {
                        'id': 'CUP',
                        'type': 'knockout',
                        'matchType': 'sets',
                        'sets': {'maxSets': 3, 'setsToWin': 2},
                        'knockout': {'standing': [
                            {'position': '1st', 'id': '{K:CUP:FIN:winner}'},
                            {'position': '2nd', 'id': '{K:CUP:FIN:loser}'},
                        ]},
                        'matches': [
                            build_match('FIN', '{P:A:league:1}', '{P:A:league:2}', date='2024-06-08'),
                            build_match(
                                'POST', '{K:CUP:FIN:winner}', '{K:CUP:FIN:loser}', date='2024-06-08',
                            ),
                        ],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def league_competition(league_data) -> Competition:
    """Provide the loaded sets league competition."""
    return Competition.load_from_data(league_data)


@pytest.fixture
def continuous_competition(continuous_data) -> Competition:
    """Provide the loaded continuous league competition."""
    return Competition.load_from_data(continuous_data)


@pytest.fixture
def knockout_competition(knockout_data) -> Competition:
    """Provide the loaded pool and knockout competition."""
    return Competition.load_from_data(knockout_data)


# =============================================================================
# STORAGE FIXTURES
# =============================================================================

@pytest.fixture
def test_data_dir():
    """Provide a temporary directory for competition files."""
    temp_dir = tempfile.mkdtemp(prefix="vbcompetitions_test_")
    yield temp_dir

    # Cleanup
    if os.path.exists(temp_dir):
        try:
            shutil.rmtree(temp_dir)
        except PermissionError:
            pass  # Windows file locking, ignore


@pytest.fixture
def write_competition(test_data_dir) -> Callable[[str, Any], str]:
    """Provide a function that writes a document into the test data directory."""
    def write(filename: str, data: Any) -> str:
        path = os.path.join(test_data_dir, filename)
        with open(path, 'w', encoding='utf-8') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f, indent=2)
        return path
    return write


@pytest.fixture(autouse=True)
def clean_store():
    """Reset the store singleton around every test."""
    reset_store()
    yield
    reset_store()
