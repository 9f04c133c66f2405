import logging
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from lorebook.core.exceptions import LorebookError
from lorebook.models.characters import Character
from lorebook.schemas.relationship import DiagnosisStatus, ParentDiagnosis, ParentRole
from lorebook.services.characters import CharacterService

logger = logging.getLogger(__name__)

__all__ = ["RelationshipService"]


def _unique(characters: Iterable[Character]) -> List[Character]:
    seen = set()
    result = []
    for character in characters:
        if character.id in seen:
            continue
        seen.add(character.id)
        result.append(character)
    return result


class RelationshipService:
    """
    Links characters to their parents and derives the wider family from
    those links.

    Parent links are inferred from free text, so every resolution outcome is
    reported as a diagnosis instead of an error. Derived relations (siblings,
    cousins, ...) are computed on demand and never stored.
    """

    def __init__(self, db: Session, character_service: Optional[CharacterService] = None):
        self.db = db
        self.characters = character_service or CharacterService(db)
        logger.debug(f"RelationshipService initialized with db session: {db}")

    # --- Resolution -----------------------------------------------------

    @staticmethod
    def _parent_name(character: Character, role: ParentRole) -> Optional[str]:
        if role is ParentRole.FATHER:
            return character.father_display_name
        return character.mother_display_name

    def _find_parent(self, character: Character, parent_name: Optional[str]) -> Optional[Character]:
        parent = self.characters.get_by_name(parent_name)
        if parent is None or parent.id == character.id:
            return None
        return parent

    def _commit(self, character: Character) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error linking parents of '{character.name}': {str(e)}", exc_info=True)
            raise LorebookError(f"Database error: {str(e)}")

    def link_parents(self, character: Character) -> Character:
        """
        Links both parents of a freshly imported character by exact name.

        Only the raw imported names are used and nothing is reported; the
        full diagnosis is left to :meth:`resolve`.
        """
        changed = False
        for role in ParentRole:
            parent = self._find_parent(character, getattr(character, f"{role.value}_name"))
            if parent is None or getattr(character, f"{role.value}_id") == parent.id:
                continue
            setattr(character, role.value, parent)
            changed = True
            logger.debug(f"Linked {role.value} '{parent.name}' to '{character.name}'")
        if changed:
            self._commit(character)
        return character

    def resolve(self, character: Character, role: ParentRole) -> ParentDiagnosis:
        """
        Finds the parent of ``character`` for the given role and links it.

        The character's parent name is looked up exactly first. Failing that,
        other characters whose ``children`` text mentions the character are
        reported as candidates without linking anything, so a person can
        confirm the name and run the resolution again.

        Args:
            character: The character whose parent is wanted
            role: Which parent to resolve

        Returns:
            ParentDiagnosis: What was found, always returned for normal lookups
        """
        role = ParentRole(role)
        parent_name = self._parent_name(character, role)

        parent = self._find_parent(character, parent_name)
        if parent is not None:
            if getattr(character, f"{role.value}_id") != parent.id:
                setattr(character, role.value, parent)
                self._commit(character)
                logger.info(f"Resolved {role.value} of '{character.name}' to '{parent.name}' (ID: {parent.id})")
            return ParentDiagnosis(
                id=character.id,
                character=character,
                role=role,
                status=DiagnosisStatus.FOUND,
                diagnosis=f"#{character.id}: found character {role.value}",
            )

        candidates = [
            candidate.name
            for candidate in self.characters.find_by_children_containing(character.name, exclude_id=character.id)
        ]
        if candidates:
            status = DiagnosisStatus.FOUND_INDIRECTLY
            diagnosis = (
                f"#{character.id}: {character.name} {role.value} found indirectly: "
                f"{', '.join(candidates)}. Change or enter the current {role.value} name "
                f"in the character's record and rerun this task."
            )
        elif not parent_name:
            status = DiagnosisStatus.NO_NAME
            diagnosis = f"#{character.id}: has no {role.value} name and was not found in any children field"
        else:
            status = DiagnosisStatus.NOT_FOUND
            diagnosis = (
                f"Parent character named {parent_name} not found for {character.name}. "
                f"Check the name spelling. Change the {role.value} name in the character's "
                f"record and rerun this task."
            )
        logger.warning(diagnosis)
        return ParentDiagnosis(
            id=character.id,
            character=character,
            role=role,
            status=status,
            candidates=candidates,
            diagnosis=diagnosis,
        )

    def resolve_all(self) -> List[ParentDiagnosis]:
        """
        Resolves father and mother for every stored character, in ID order.

        Safe to run repeatedly: links already in place are left untouched.
        """
        characters = self.characters.list_all()
        logger.info(f"Resolving parents for {len(characters)} characters.")
        results = []
        for character in characters:
            for role in ParentRole:
                results.append(self.resolve(character, role))
        found = sum(1 for result in results if result.status is DiagnosisStatus.FOUND)
        logger.info(f"Parent resolution finished: {found} of {len(results)} links found.")
        return results

    # --- Derived relations ----------------------------------------------

    def parents(self, character: Optional[Character]) -> List[Character]:
        if character is None:
            return []
        return [parent for parent in (character.father, character.mother) if parent is not None]

    def children(self, character: Optional[Character]) -> List[Character]:
        if character is None or character.id is None:
            return []
        return (
            self.db.query(Character)
            .filter(or_(Character.father_id == character.id, Character.mother_id == character.id))
            .order_by(Character.id)
            .all()
        )

    def siblings(self, character: Optional[Character]) -> List[Character]:
        """Characters sharing a linked father or mother, full and half siblings alike."""
        if character is None:
            return []
        conditions = []
        if character.father_id is not None:
            conditions.append(Character.father_id == character.father_id)
        if character.mother_id is not None:
            conditions.append(Character.mother_id == character.mother_id)
        if not conditions:
            return []
        return (
            self.db.query(Character)
            .filter(or_(*conditions))
            .filter(Character.id != character.id)
            .order_by(Character.id)
            .all()
        )

    def grandparents(self, character: Character) -> List[Character]:
        return _unique(self.parents(character.father) + self.parents(character.mother))

    def grandchildren(self, character: Character) -> List[Character]:
        return _unique(
            grandchild
            for child in self.children(character)
            for grandchild in self.children(child)
        )

    def uncles_and_aunts(self, character: Character) -> List[Character]:
        return _unique(self.siblings(character.father) + self.siblings(character.mother))

    def cousins(self, character: Character) -> List[Character]:
        return _unique(
            cousin
            for relative in self.uncles_and_aunts(character)
            for cousin in self.children(relative)
        )
