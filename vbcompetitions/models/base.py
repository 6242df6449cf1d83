"""Shared pieces of the competition document models."""

from pydantic import BaseModel

# ASCII printable characters excluding " : { } ? =
ID_PATTERN = r'^[\x20\x21\x23-\x39\x3B\x3C\x3E\x40-\x7A\x7C\x7E\x7F]+$'
DATE_PATTERN = r'^[0-9]{4}-(0[0-9]|1[0-2])-([0-2][0-9]|3[01])$'
TIME_PATTERN = r'^([01][0-9]|2[0-3]):[0-5][0-9]$'
DURATION_PATTERN = r'^[0-9]+:[0-5][0-9]$'


class DocumentModel(BaseModel):
    """Base for every object in a competition document."""

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
        extra = 'forbid'

    def to_data(self) -> dict:
        """Dump the model as document JSON, keeping only the fields that were set."""
        return self.model_dump(by_alias=True, exclude_unset=True)
