from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from lorebook.models.characters import Character

class ImportOutcome(BaseModel):
    """Result of importing a single row."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    imported: bool
    source: Dict[Any, Any] = Field(description="The row exactly as it was read.")
    character: Optional[Character] = None
    errors: List[str] = Field(default_factory=list)

class ImportReport(BaseModel):
    outcomes: List[ImportOutcome] = Field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.imported)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.imported)
