"""
Type definitions for volleyball competitions.

Provides TypedDict classes for structured data returned by the storage layer.
"""

from typing import TypedDict, List


class MetadataDict(TypedDict):
    """One competition metadata entry."""
    key: str
    value: str


class CompetitionSummaryDict(TypedDict, total=False):
    """
    A competition file found in the data directory.

    Valid files carry name, completion and metadata, invalid ones carry the
    error message instead.
    """
    file: str
    is_valid: bool
    is_complete: bool
    name: str
    metadata: List[MetadataDict]
    error_message: str
