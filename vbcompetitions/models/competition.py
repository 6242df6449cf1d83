"""Competition, stage and team document models."""

import logging
from typing import Annotated, Any, Literal, Optional

from pydantic import Field, ValidationError

from vbcompetitions import config
from vbcompetitions.exceptions import DocumentError
from vbcompetitions.models.base import ID_PATTERN, DocumentModel
from vbcompetitions.models.group import GroupData
from vbcompetitions.models.match import GroupEntryData

logger = logging.getLogger(__name__)

TeamContactRole = Literal['treasurer', 'secretary', 'manager', 'captain', 'coach', 'assistantCoach', 'medic']
ClubContactRole = Literal[
    'chair', 'vice', 'treasurer', 'secretary', 'welfare',
    'communications', 'marketing', 'volunteer', 'logistics', 'coaching',
]


class MetadataItem(DocumentModel):
    """A key/value pair describing the competition."""

    key: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., min_length=1, max_length=1000)


class ContactData(DocumentModel):
    """A named contact with one or more roles.

    Subclasses narrow the roles to those allowed for a team or a club.
    """

    id: str = Field(..., min_length=1, max_length=100, pattern=ID_PATTERN)
    name: Optional[str] = Field(None, min_length=1, max_length=1000)
    notes: Optional[str] = None
    roles: list[str] = Field(..., min_length=1)
    emails: Optional[list[Annotated[str, Field(min_length=3)]]] = None
    phones: Optional[list[Annotated[str, Field(min_length=1, max_length=50)]]] = None


class TeamContactData(ContactData):
    roles: list[TeamContactRole] = Field(..., min_length=1)


class ClubContactData(ContactData):
    roles: list[ClubContactRole] = Field(..., min_length=1)


class ClubData(DocumentModel):
    """A club that teams can belong to."""

    id: str = Field(..., min_length=1, max_length=100, pattern=ID_PATTERN)
    name: str = Field(..., min_length=1, max_length=1000)
    notes: Optional[str] = None
    contacts: Optional[list[ClubContactData]] = None


class TeamData(DocumentModel):
    """A team entered in the competition."""

    id: str = Field(..., min_length=1, max_length=100, pattern=ID_PATTERN)
    name: str = Field(..., min_length=1, max_length=1000)
    club: Optional[str] = Field(None, min_length=1, max_length=100, pattern=ID_PATTERN)
    contacts: Optional[list[TeamContactData]] = None
    notes: Optional[str] = None


class IfUnknownData(DocumentModel):
    """Placeholder schedule shown while the teams in a stage are not yet known."""

    description: list[str] = Field(..., min_length=1)
    matches: list[GroupEntryData] = Field(..., min_length=1)


class StageData(DocumentModel):
    """A stage of the competition."""

    id: str = Field(..., min_length=1, max_length=100, pattern=ID_PATTERN)
    name: Optional[str] = Field(None, min_length=1, max_length=1000)
    notes: Optional[str] = None
    description: Optional[list[str]] = Field(None, min_length=1)
    groups: list[GroupData] = Field(..., min_length=1)
    if_unknown: Optional[IfUnknownData] = Field(None, alias="ifUnknown")


class CompetitionDocument(DocumentModel):
    """The root of a competition document."""

    version: str
    metadata: Optional[list[MetadataItem]] = None
    name: str = Field(..., min_length=1, max_length=1000)
    notes: Optional[str] = None
    clubs: Optional[list[ClubData]] = None
    teams: list[TeamData]
    stages: list[StageData]


def _json_pointer(data: Any, loc: tuple) -> str:
    """Turn a pydantic error location into a JSON pointer into the document.

    Union tags that pydantic adds to the location are skipped by walking the
    document alongside the location.
    """
    parts = []
    node = data
    for index, element in enumerate(loc):
        if isinstance(node, dict) and element in node:
            node = node[element]
        elif isinstance(node, list) and isinstance(element, int) and 0 <= element < len(node):
            node = node[element]
        elif index < len(loc) - 1:
            # Union tag added by pydantic
            continue
        parts.append(str(element).replace('~', '~0').replace('/', '~1'))
    return '/' + '/'.join(parts)


def validate_document(data: Any) -> CompetitionDocument:
    """Validate parsed JSON data against the competition document models.

    Args:
        data: Parsed JSON document

    Returns:
        The validated document

    Raises:
        DocumentError: If the data does not match the document schema
    """
    try:
        return CompetitionDocument.model_validate(data)
    except ValidationError as err:
        errors = [
            f"[{_json_pointer(data, tuple(error['loc']))}] {error['msg']}"
            for error in err.errors()[:config.MAX_SCHEMA_ERRORS]
        ]
        logger.debug(f"Schema validation failed with {err.error_count()} errors")
        raise DocumentError('Competition data failed schema validation', errors) from err
