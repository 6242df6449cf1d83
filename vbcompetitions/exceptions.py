"""
Exceptions raised while loading, validating and updating competitions.

- CompetitionError: Base exception for all competition errors
- DocumentError: Invalid JSON, unsupported version or schema violations
- StructuralError: Duplicate IDs, dangling references, invalid team IDs
- ScoreError: Score arrays that break the match scoring rules
- EntityNotFoundError: Direct lookup of a stage/group/match that does not exist
- StorageError: Competition files that cannot be read or written
"""

from typing import Optional


class CompetitionError(Exception):
    """Base exception for all competition errors."""
    pass


class DocumentError(CompetitionError):
    """The document is not valid JSON, has an unsupported version or fails the schema."""

    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        if not self.errors:
            return super().__str__()
        return super().__str__() + ': ' + '\n'.join(self.errors)


class StructuralError(CompetitionError):
    """The document is schema-valid but its entities are inconsistent."""
    pass


class ScoreError(CompetitionError):
    """Match scores break the scoring rules for the group."""
    pass


class EntityNotFoundError(CompetitionError, LookupError):
    """A stage, group or match with the requested ID does not exist."""
    pass


class StorageError(CompetitionError):
    """A competition file cannot be read or written."""
    pass
