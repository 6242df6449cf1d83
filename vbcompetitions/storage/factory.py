"""
Factory function for the shared competition store.

Reads the data directory from configuration unless one is given.
"""

import logging
from typing import Optional

from .files import CompetitionStore

logger = logging.getLogger(__name__)

# Singleton instance
_store_instance: Optional[CompetitionStore] = None


def get_store(data_dir: Optional[str] = None) -> CompetitionStore:
    """
    Get or create the competition store.

    Args:
        data_dir: Directory holding competition files, only used when the store is
            first created (default: VBC_DATA_DIR)

    Returns:
        The shared CompetitionStore
    """
    global _store_instance

    if _store_instance is None:
        _store_instance = CompetitionStore(data_dir)
        logger.info(f"Using competition data directory {_store_instance.data_dir}")

    return _store_instance


def reset_store() -> None:
    """
    Reset the store singleton.

    Useful for testing or when configuration changes.
    """
    global _store_instance
    _store_instance = None
