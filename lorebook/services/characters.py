import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from lorebook.core.exceptions import (
    CharacterNotFoundError,
    CharacterValidationError,
    LorebookError,
)
from lorebook.models.characters import Character
from lorebook.models.house import House
from lorebook.models.image import Image

logger = logging.getLogger(__name__)

__all__ = ["CharacterService"]

NAME_BLANK = "Name can't be blank"
NAME_TAKEN = "Name has already been taken"
DESCRIPTION_BLANK = "Description can't be blank"

class CharacterService:
    def __init__(self, db: Session):
        """
        Initializes the CharacterService with a database session.

        Args:
            db (Session): The SQLAlchemy database session.
        """
        self.db = db
        logger.debug(f"CharacterService initialized with db session: {db}")

    def validate(self, character: Character) -> List[str]:
        """
        Collects the validation messages for a character without saving it.

        Args:
            character: A new or already persisted character

        Returns:
            List[str]: Full error messages, empty when the character is valid
        """
        errors = []
        if not character.name or not character.name.strip():
            errors.append(NAME_BLANK)
        else:
            query = self.db.query(Character.id).filter(Character.name == character.name)
            if character.id is not None:
                query = query.filter(Character.id != character.id)
            if query.first() is not None:
                errors.append(NAME_TAKEN)
        if not character.description or not character.description.strip():
            errors.append(DESCRIPTION_BLANK)
        return errors

    def save(self, character: Character) -> Character:
        """
        Validates and commits a character.

        Args:
            character: The character to persist

        Returns:
            Character: The saved, refreshed character

        Raises:
            CharacterValidationError: If the character is invalid or violates the name constraint
            LorebookError: If a database error occurs
        """
        errors = self.validate(character)
        if errors:
            logger.warning(f"Rejected character '{character.name}': {', '.join(errors)}")
            # Drop any in-memory changes so the store is left as it was
            self.db.rollback()
            raise CharacterValidationError(errors)

        try:
            self.db.add(character)
            self.db.commit()
            self.db.refresh(character)
            logger.info(f"Saved character '{character.name}' with ID: {character.id}")
            return character

        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Database integrity error saving character: {str(e)}", exc_info=True)
            raise CharacterValidationError([NAME_TAKEN])
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error saving character: {str(e)}", exc_info=True)
            raise LorebookError(f"Database error: {str(e)}")

    def upsert(
        self,
        attributes: Dict[str, Any],
        images: Sequence[Tuple[int, str, Optional[str]]] = (),
        house: Optional[House] = None,
    ) -> Character:
        """
        Creates a character or fully replaces the one with the same name.

        Every attribute, the house and the image collection are overwritten;
        nothing from the previous version is merged in.

        Args:
            attributes: Column values keyed by attribute name, ``name`` included
            images: ``(position, source, caption)`` tuples in slot order
            house: The house to attach, or None

        Returns:
            Character: The saved character

        Raises:
            CharacterValidationError: If the resulting character is invalid
        """
        name = attributes.get("name")
        character = self.get_by_name(name) if name else None
        if character is None:
            logger.debug(f"No character named '{name}', creating a new one.")
            character = Character()
        else:
            logger.debug(f"Replacing attributes of existing character '{name}' (ID: {character.id}).")

        for key, value in attributes.items():
            setattr(character, key, value)
        character.house = house
        character.images = [
            Image(position=position, source=source, caption=caption)
            for position, source, caption in images
        ]
        return self.save(character)

    def get_by_id(self, character_id: int) -> Optional[Character]:
        return self.db.get(Character, character_id)

    def require_by_id(self, character_id: int) -> Character:
        """
        Retrieves a character by ID.

        Raises:
            CharacterNotFoundError: If no character has that ID
        """
        character = self.get_by_id(character_id)
        if character is None:
            logger.warning(f"Character with ID '{character_id}' not found.")
            raise CharacterNotFoundError(character_id=character_id)
        return character

    def get_by_name(self, name: str) -> Optional[Character]:
        """Exact, case-sensitive name lookup."""
        if not name:
            return None
        return self.db.query(Character).filter(Character.name == name).first()

    def require_by_name(self, name: str) -> Character:
        """
        Retrieves a character by exact name.

        Raises:
            CharacterNotFoundError: If no character has that name
        """
        character = self.get_by_name(name)
        if character is None:
            logger.warning(f"Character with name '{name}' not found.")
            raise CharacterNotFoundError(name=name)
        return character

    def find_by_children_containing(self, name: str, exclude_id: Optional[int] = None) -> List[Character]:
        """
        Scans the free-text ``children`` field for ``name`` as a substring.

        This is deliberately loose: "Jo" matches a field listing "Jose".
        """
        if not name:
            return []
        query = self.db.query(Character).filter(Character.children.contains(name, autoescape=True))
        if exclude_id is not None:
            query = query.filter(Character.id != exclude_id)
        return query.order_by(Character.id).all()

    def list_all(self) -> List[Character]:
        return self.db.query(Character).order_by(Character.id).all()

    def count(self) -> int:
        return self.db.query(Character).count()

    def delete(self, character: Character) -> None:
        """
        Deletes a character together with its images.

        Raises:
            LorebookError: If a database error occurs
        """
        logger.info(f"Deleting character '{character.name}' (ID: {character.id})")
        try:
            self.db.delete(character)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error deleting character: {str(e)}", exc_info=True)
            raise LorebookError(f"Database error: {str(e)}")

    def get_house_by_name(self, name: Optional[str]) -> Optional[House]:
        if not name:
            return None
        return self.db.query(House).filter(House.name == name).first()
