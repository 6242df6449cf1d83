"""Load, validate, query and update volleyball competition documents."""

from vbcompetitions.core import Competition, Stage, Team
from vbcompetitions.exceptions import (
    CompetitionError,
    DocumentError,
    EntityNotFoundError,
    ScoreError,
    StorageError,
    StructuralError,
)

__version__ = "1.0.0"

__all__ = [
    "Competition", "Stage", "Team",
    "CompetitionError", "DocumentError", "StructuralError", "ScoreError", "EntityNotFoundError", "StorageError",
]
