"""
Storage module for competition files.

Usage:
    from vbcompetitions.storage import get_store

    store = get_store()  # Uses VBC_DATA_DIR
    competition = store.load('league.json')
"""

from .files import CompetitionStore
from .factory import get_store, reset_store

__all__ = [
    'CompetitionStore',
    'get_store',
    'reset_store',
]
