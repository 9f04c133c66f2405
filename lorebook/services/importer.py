import csv
import logging
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, TextIO

from pydantic import ValidationError
from sqlalchemy.orm import Session

from lorebook.core.exceptions import CharacterValidationError, ImportFormatError, LorebookError
from lorebook.schemas.character import CharacterRow
from lorebook.schemas.importer import ImportOutcome, ImportReport
from lorebook.services.characters import CharacterService
from lorebook.services.relationships import RelationshipService

logger = logging.getLogger(__name__)

__all__ = ["ImporterService"]

class ImporterService:
    """
    Turns spreadsheet rows into characters.

    Each row is imported on its own: a row that fails validation produces a
    failed outcome and the batch carries on with the next one.
    """

    def __init__(
        self,
        db: Session,
        character_service: Optional[CharacterService] = None,
        relationship_service: Optional[RelationshipService] = None,
    ):
        self.db = db
        self.characters = character_service or CharacterService(db)
        self.relationships = relationship_service or RelationshipService(db, self.characters)
        logger.debug(f"ImporterService initialized with db session: {db}")

    def import_row(self, row: Optional[Mapping[str, Any]]) -> Optional[ImportOutcome]:
        """
        Imports one row, creating the character or replacing the one with the same name.

        Args:
            row: Header -> cell text mapping; None is ignored

        Returns:
            ImportOutcome: Whether the row was imported, with the character or the errors.
                None when no row was given.
        """
        if row is None:
            return None
        source = dict(row)

        try:
            character_row = CharacterRow.from_mapping(source)
        except ValidationError as e:
            logger.warning(f"Row could not be read: {e}")
            return ImportOutcome(imported=False, source=source, errors=[str(err["msg"]) for err in e.errors()])

        house = self.characters.get_house_by_name(character_row.house)
        if character_row.house and house is None:
            logger.debug(f"House '{character_row.house}' not found, leaving '{character_row.name}' without a house.")

        try:
            character = self.characters.upsert(
                character_row.character_attributes(),
                images=character_row.image_slots(),
                house=house,
            )
        except CharacterValidationError as e:
            logger.warning(f"Row for '{character_row.name}' was not imported: {', '.join(e.errors)}")
            return ImportOutcome(imported=False, source=source, errors=e.errors)
        except LorebookError as e:
            logger.error(f"Row for '{character_row.name}' failed: {e}")
            return ImportOutcome(imported=False, source=source, errors=[str(e)])

        try:
            self.relationships.link_parents(character)
        except LorebookError as e:
            # The character itself is saved; the batch reconciliation can link it later
            logger.error(f"Could not link parents of '{character.name}': {e}")
        logger.info(f"Imported character '{character.name}' (ID: {character.id}) with {len(character.images)} images.")
        return ImportOutcome(imported=True, source=source, character=character)

    def import_rows(self, rows: Iterable[Optional[Mapping[str, Any]]]) -> ImportReport:
        report = ImportReport()
        for row in rows:
            outcome = self.import_row(row)
            if outcome is not None:
                report.outcomes.append(outcome)
        logger.info(f"Import finished: {report.imported_count} imported, {report.failed_count} rejected.")
        return report

    def import_csv(self, stream: TextIO) -> ImportReport:
        """
        Imports every row of a CSV document whose first line holds the headers.

        Rows before an unreadable line stay imported; each row is committed
        on its own.

        Raises:
            ImportFormatError: If the document has no header row, is not
                valid text in the expected encoding, or is malformed CSV
        """
        reader = csv.DictReader(stream)
        try:
            fieldnames = reader.fieldnames
        except (UnicodeDecodeError, csv.Error) as e:
            logger.error(f"CSV header could not be read: {e}")
            raise ImportFormatError(f"CSV input could not be read at line {reader.line_num}: {e}")
        if not fieldnames:
            raise ImportFormatError("CSV input is empty or has no header row.")
        logger.debug(f"CSV headers: {fieldnames}")
        return self.import_rows(self._read_rows(reader))

    @staticmethod
    def _read_rows(reader: csv.DictReader) -> Iterator[Dict[str, Any]]:
        try:
            for row in reader:
                yield row
        except (UnicodeDecodeError, csv.Error) as e:
            logger.error(f"CSV input became unreadable after line {reader.line_num}: {e}")
            raise ImportFormatError(f"CSV input could not be read after line {reader.line_num}: {e}")
