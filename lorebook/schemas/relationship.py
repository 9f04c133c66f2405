import enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from lorebook.models.characters import Character

class ParentRole(str, enum.Enum):
    FATHER = "father"
    MOTHER = "mother"

class DiagnosisStatus(str, enum.Enum):
    FOUND = "found"
    FOUND_INDIRECTLY = "found_indirectly"
    NO_NAME = "no_name"
    NOT_FOUND = "not_found"

class ParentDiagnosis(BaseModel):
    """
    Outcome of one parent resolution attempt, meant for human review.

    ``candidates`` is only filled when the parent was found indirectly,
    through other characters' ``children`` text.
    ``id`` is None when the character has not been saved yet.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[int]
    character: Character
    role: ParentRole
    status: DiagnosisStatus
    candidates: List[str] = Field(default_factory=list)
    diagnosis: str
