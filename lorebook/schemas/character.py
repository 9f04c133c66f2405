import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lorebook.models.characters import SEASON_COUNT
from lorebook.models.image import IMAGE_SLOTS

# Plain biographical columns copied verbatim from a row onto the character
BIOGRAPHICAL_FIELDS = (
    "biography",
    "personality",
    "titles",
    "status",
    "death",
    "origin",
    "allegiance",
    "religion",
    "predecessor",
    "successor",
    "spouse",
    "culture",
)

# Free-text family columns, stored as-is and resolved later
FAMILY_TEXT_FIELDS = ("children", "siblings", "lovers")

_HEADER_SEPARATORS = re.compile(r"[\s\-]+")


def normalize_header(header: Any) -> str:
    """Turns a spreadsheet header such as ``"Image 1 Src"`` into ``image_1_src``."""
    text = str(header).strip().lower()
    text = _HEADER_SEPARATORS.sub("_", text)
    return re.sub(r"[^\w]", "", text)


class CharacterRow(BaseModel):
    """
    One spreadsheet row describing a character.

    Every column is optional at this level; required fields are enforced
    when the character is saved so the error ends up in the import outcome.
    Blank cells are read as ``None``.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(default=None, examples=["Vermithrax"])
    description: Optional[str] = Field(default=None, examples=["A dragon bred by House Targaryen."])
    biography: Optional[str] = None
    personality: Optional[str] = None
    titles: Optional[str] = None
    status: Optional[str] = None
    death: Optional[str] = None
    origin: Optional[str] = None
    allegiance: Optional[str] = None
    religion: Optional[str] = None
    predecessor: Optional[str] = None
    successor: Optional[str] = None
    father: Optional[str] = None
    mother: Optional[str] = None
    spouse: Optional[str] = None
    children: Optional[str] = None
    siblings: Optional[str] = None
    lovers: Optional[str] = None
    culture: Optional[str] = None
    seasons: Optional[str] = Field(default=None, examples=["2, 5 ,7 ,10"])
    house: Optional[str] = Field(default=None, examples=["House Targaryen"])

    image_1_src: Optional[str] = None
    image_1_caption: Optional[str] = None
    image_2_src: Optional[str] = None
    image_2_caption: Optional[str] = None
    image_3_src: Optional[str] = None
    image_3_caption: Optional[str] = None
    image_4_src: Optional[str] = None
    image_4_caption: Optional[str] = None
    image_5_src: Optional[str] = None
    image_5_caption: Optional[str] = None
    image_6_src: Optional[str] = None
    image_6_caption: Optional[str] = None
    image_7_src: Optional[str] = None
    image_7_caption: Optional[str] = None
    image_8_src: Optional[str] = None
    image_8_caption: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Strip cell text and convert empty cells to None."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @classmethod
    def from_mapping(cls, row: Mapping[Any, Any]) -> "CharacterRow":
        """Builds a row from any header -> value mapping, normalizing the headers."""
        normalized = {}
        for header, value in row.items():
            if header is None:
                # csv.DictReader puts surplus cells under a None key
                continue
            normalized[normalize_header(header)] = value
        return cls.model_validate(normalized)

    def season_flags(self) -> Dict[int, bool]:
        """
        Maps season numbers 1..9 to whether the character appears in them.

        The seasons text is stripped of whitespace and split on commas; a
        season is flagged only when its number is one of the tokens, so
        ``"10"`` does not flag season 1.
        """
        tokens: List[str] = []
        if self.seasons:
            tokens = "".join(self.seasons.split()).split(",")
        return {season: str(season) in tokens for season in range(1, SEASON_COUNT + 1)}

    def image_slots(self) -> List[Tuple[int, str, Optional[str]]]:
        """Returns ``(position, src, caption)`` for each slot with a source, in slot order."""
        slots = []
        for position in range(1, IMAGE_SLOTS + 1):
            src = getattr(self, f"image_{position}_src")
            if not src:
                continue
            slots.append((position, src, getattr(self, f"image_{position}_caption")))
        return slots

    def character_attributes(self) -> Dict[str, Any]:
        """Normalized column values for the character, house and images excluded."""
        attributes: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "father_name": self.father,
            "mother_name": self.mother,
        }
        for field in BIOGRAPHICAL_FIELDS + FAMILY_TEXT_FIELDS:
            attributes[field] = getattr(self, field)
        for season, appears in self.season_flags().items():
            attributes[f"appears_in_season_{season}"] = appears
        return attributes
