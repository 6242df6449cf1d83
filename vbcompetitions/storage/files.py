"""
Competition files in a data directory.

Each competition is a single JSON document. Writes go to a temporary file in
the same directory which then replaces the original, so a failed update never
leaves a partly written file behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from vbcompetitions import config
from vbcompetitions.core.competition import Competition
from vbcompetitions.exceptions import CompetitionError, EntityNotFoundError, ScoreError, StorageError
from vbcompetitions.types import CompetitionSummaryDict

logger = logging.getLogger(__name__)


class CompetitionStore:
    """Loads, saves and updates competition files in one directory."""

    def __init__(self, data_dir: Optional[str] = None) -> None:
        """
        Initialize the store.

        Args:
            data_dir: Directory holding competition files (default: config.DATA_DIR)
        """
        self.data_dir = Path(data_dir if data_dir is not None else config.DATA_DIR)

    def _path(self, filename: str) -> Path:
        if not filename or Path(filename).name != filename:
            raise StorageError(f'Invalid competition file name "{filename}"')
        return self.data_dir / filename

    def load(self, filename: str) -> Competition:
        """
        Load and fully validate a competition file.

        Raises:
            EntityNotFoundError: If the file does not exist
            StorageError: If the file cannot be read
            DocumentError, StructuralError, ScoreError: If the competition is invalid
        """
        path = self._path(filename)
        try:
            competition_json = path.read_text(encoding='utf-8')
        except FileNotFoundError as err:
            raise EntityNotFoundError(f'Competition file {filename} not found') from err
        except OSError as err:
            raise StorageError(f'Failed to read competition file {filename}') from err

        competition = Competition.load_from_json(competition_json)
        logger.debug(f"Loaded competition file {path}")
        return competition

    def save(self, competition: Competition, filename: str) -> None:
        """
        Write a competition to a file, replacing any existing file.

        The competition is validated before anything is written.

        Raises:
            DocumentError, StructuralError, ScoreError: If the competition is invalid
            StorageError: If the file cannot be written
        """
        path = self._path(filename)
        data = competition.to_dict()
        if config.VALIDATE_ON_SAVE:
            Competition.load_from_data(data)
        else:
            Competition.validate_data(data)

        indent = config.WRITE_INDENT or None
        self._write_atomic(path, json.dumps(data, indent=indent, ensure_ascii=False))
        logger.info(f"Saved competition '{competition.name}' to {path}")

    def _write_atomic(self, path: Path, content: str) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f'.{path.name}.', suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(content)
                os.replace(tmp_path, path)
            except OSError:
                os.unlink(tmp_path)
                raise
        except OSError as err:
            raise StorageError(f'Failed to write competition file {path.name}') from err

    def update_match_results(
        self,
        filename: str,
        stage_id: str,
        group_id: str,
        match_id: str,
        home_scores: list[int],
        away_scores: list[int],
        complete: Optional[bool] = None,
    ) -> Competition:
        """
        Set the scores for one match in a competition file.

        The file is only rewritten when the new scores are valid and the whole
        competition still validates with them.

        Args:
            filename: Competition file in the data directory
            stage_id: Stage containing the match
            group_id: Group containing the match
            match_id: Match to update
            home_scores: New home team scores
            away_scores: New away team scores
            complete: Whether the match is complete

        Returns:
            The updated competition

        Raises:
            ScoreError: If the scores are invalid for the match
            EntityNotFoundError: If the file, stage, group or match does not exist
        """
        if len(home_scores) != len(away_scores):
            raise ScoreError('Invalid results: score lengths are different')
        for score in home_scores:
            if not isinstance(score, int) or isinstance(score, bool):
                raise ScoreError('Invalid results: found a non-integer home team score value')
        for score in away_scores:
            if not isinstance(score, int) or isinstance(score, bool):
                raise ScoreError('Invalid results: found a non-integer away team score value')

        competition = self.load(filename)
        match = competition.get_stage(stage_id).get_group(group_id).get_match(match_id)
        match.set_scores(home_scores, away_scores, complete)

        self.save(competition, filename)
        logger.info(f"Updated results for match {match.tag} in {filename}")
        return competition

    def list_competitions(self, metadata_matches: Optional[dict[str, str]] = None) -> list[CompetitionSummaryDict]:
        """
        List the competition files in the data directory.

        Args:
            metadata_matches: Key/value pairs that must all appear in a competition's
                metadata for it to be listed

        Returns:
            One summary per ``.json`` file, sorted by file name. Files that fail to load
            are listed as invalid with the error message.

        Raises:
            StorageError: If a metadata key or value has an invalid length
        """
        if metadata_matches:
            for key, value in metadata_matches.items():
                if len(key) > 100 or len(key) < 1:
                    raise StorageError(f'Invalid metadata search key "{key}": must be between 1 and 100 characters long')
                if len(value) > 1000 or len(value) < 1:
                    raise StorageError(
                        f'Invalid metadata search value "{value}": must be between 1 and 1000 characters long'
                    )

        competitions: list[CompetitionSummaryDict] = []
        if not self.data_dir.is_dir():
            return competitions

        for path in sorted(self.data_dir.glob('*.json')):
            if not path.is_file() or not path.stem:
                continue
            if metadata_matches and not self._metadata_matches(path, metadata_matches):
                continue

            try:
                competition = self.load(path.name)
            except CompetitionError as err:
                logger.warning(f"Competition file {path.name} is invalid: {err}")
                competitions.append({'file': path.name, 'is_valid': False, 'error_message': str(err)})
                continue

            competitions.append({
                'file': path.name,
                'is_valid': True,
                'is_complete': competition.is_complete(),
                'name': competition.name,
                'metadata': competition.get_metadata(),
            })

        return competitions

    @staticmethod
    def _metadata_matches(path: Path, metadata_matches: dict[str, str]) -> bool:
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, ValueError):
            return False
        if not isinstance(data, dict):
            return False

        metadata = {
            item.get('key'): item.get('value')
            for item in data.get('metadata') or []
            if isinstance(item, dict)
        }
        return all(metadata.get(key) == value for key, value in metadata_matches.items())
