from typing import Callable, Dict, List, Optional, Union

from lorebook.models.characters import Character, split_names
from lorebook.services.relationships import RelationshipService

UNKNOWN = "Unknown"
NONE_OR_UNKNOWN = "None or unknown"

class CharacterPresenter:
    """
    Formats a character's family for display.

    Parents fall back to the imported free-text name when no record is
    linked. Children and siblings fall back to the free-text lists, and any
    relative list that is still empty shows a placeholder.
    """

    def __init__(self, character: Character, relationships: RelationshipService):
        self.character = character
        self.relationships = relationships

    def father(self) -> str:
        return self.character.father_display_name or UNKNOWN

    def mother(self) -> str:
        return self.character.mother_display_name or UNKNOWN

    def children(self) -> Union[List[str], str]:
        return self._relatives(self.relationships.children, self.character.children)

    def siblings(self) -> Union[List[str], str]:
        return self._relatives(self.relationships.siblings, self.character.siblings)

    def grandparents(self) -> Union[List[str], str]:
        return self._relatives(self.relationships.grandparents)

    def grandchildren(self) -> Union[List[str], str]:
        return self._relatives(self.relationships.grandchildren)

    def uncles_and_aunts(self) -> Union[List[str], str]:
        return self._relatives(self.relationships.uncles_and_aunts)

    def cousins(self) -> Union[List[str], str]:
        return self._relatives(self.relationships.cousins)

    def summary(self) -> Dict[str, Union[List[str], str]]:
        return {
            "name": self.character.name,
            "house": self.character.house.name if self.character.house else UNKNOWN,
            "father": self.father(),
            "mother": self.mother(),
            "children": self.children(),
            "siblings": self.siblings(),
            "grandparents": self.grandparents(),
            "grandchildren": self.grandchildren(),
            "uncles_and_aunts": self.uncles_and_aunts(),
            "cousins": self.cousins(),
        }

    def _relatives(
        self,
        query: Callable[[Character], List[Character]],
        free_text: Optional[str] = None,
    ) -> Union[List[str], str]:
        names = [relative.name.strip() for relative in query(self.character)]
        if not names:
            # Unlinked relatives are shown as imported
            names = split_names(free_text)
        if not names:
            return NONE_OR_UNKNOWN
        return names
