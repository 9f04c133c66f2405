from typing import List, Optional


class LorebookError(Exception):
    """Base class for errors raised by the lorebook services."""


class CharacterValidationError(LorebookError):
    """
    Raised when a character cannot be saved.

    Carries the full, human-readable validation messages so callers (the
    importer in particular) can report them without re-deriving anything.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Character is invalid")


class CharacterNotFoundError(LorebookError):
    def __init__(self, name: Optional[str] = None, character_id: Optional[int] = None):
        self.name = name
        self.character_id = character_id
        if name is not None:
            message = f"Character named '{name}' not found."
        else:
            message = f"Character with ID '{character_id}' not found."
        super().__init__(message)


class ImportFormatError(LorebookError):
    """Raised when import input cannot be read as a table with a header row."""
