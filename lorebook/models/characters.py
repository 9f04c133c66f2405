from typing import List, Optional

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lorebook.database import Base

SEASON_COUNT = 9

def split_names(text: Optional[str]) -> List[str]:
    """Splits a comma separated free-text name list, dropping blanks."""
    if not text:
        return []
    return [name.strip() for name in text.split(",") if name.strip()]

class Character(Base):
    """
    SQLAlchemy model for an encyclopedia character.

    Parents are kept twice: ``father_id``/``mother_id`` hold the resolved
    link, while ``father_name``/``mother_name`` keep the free text the record
    was imported with. Resolution is best-effort, so the two may disagree.
    ``children``, ``siblings`` and ``lovers`` are never normalized into keys.
    """
    __tablename__ = "characters"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)

    biography = Column(Text, nullable=True)
    personality = Column(Text, nullable=True)
    titles = Column(Text, nullable=True)
    status = Column(String(255), nullable=True)
    death = Column(Text, nullable=True)
    origin = Column(String(255), nullable=True)
    allegiance = Column(Text, nullable=True)
    religion = Column(String(255), nullable=True)
    predecessor = Column(String(255), nullable=True)
    successor = Column(String(255), nullable=True)
    spouse = Column(Text, nullable=True)
    culture = Column(String(255), nullable=True)

    # Free-text relations
    father_name = Column(String(200), nullable=True)
    mother_name = Column(String(200), nullable=True)
    children = Column(Text, nullable=True)
    siblings = Column(Text, nullable=True)
    lovers = Column(Text, nullable=True)

    # Resolved relations
    father_id = Column(Integer, ForeignKey("characters.id", ondelete="SET NULL"), nullable=True, index=True)
    mother_id = Column(Integer, ForeignKey("characters.id", ondelete="SET NULL"), nullable=True, index=True)

    house_id = Column(Integer, ForeignKey("houses.id", ondelete="SET NULL"), nullable=True, index=True)

    appears_in_season_1 = Column(Boolean, default=False, nullable=False)
    appears_in_season_2 = Column(Boolean, default=False, nullable=False)
    appears_in_season_3 = Column(Boolean, default=False, nullable=False)
    appears_in_season_4 = Column(Boolean, default=False, nullable=False)
    appears_in_season_5 = Column(Boolean, default=False, nullable=False)
    appears_in_season_6 = Column(Boolean, default=False, nullable=False)
    appears_in_season_7 = Column(Boolean, default=False, nullable=False)
    appears_in_season_8 = Column(Boolean, default=False, nullable=False)
    appears_in_season_9 = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    house = relationship("House", back_populates="characters")
    images = relationship(
        "Image",
        back_populates="character",
        cascade="all, delete-orphan",
        order_by="Image.position",
        passive_deletes=True,
    )

    father = relationship(
        "Character",
        remote_side="Character.id",
        foreign_keys="Character.father_id",
        back_populates="children_as_father",
    )
    mother = relationship(
        "Character",
        remote_side="Character.id",
        foreign_keys="Character.mother_id",
        back_populates="children_as_mother",
    )
    children_as_father = relationship(
        "Character", foreign_keys="Character.father_id", back_populates="father"
    )
    children_as_mother = relationship(
        "Character", foreign_keys="Character.mother_id", back_populates="mother"
    )

    @property
    def father_display_name(self) -> Optional[str]:
        """Name of the linked father, falling back to the imported text."""
        if self.father is not None:
            return self.father.name
        return self.father_name

    @property
    def mother_display_name(self) -> Optional[str]:
        if self.mother is not None:
            return self.mother.name
        return self.mother_name

    @property
    def children_names(self) -> List[str]:
        linked = [child.name for child in self.children_as_father + self.children_as_mother]
        if linked:
            return linked
        return split_names(self.children)

    @property
    def season_appearances(self) -> List[int]:
        return [
            season for season in range(1, SEASON_COUNT + 1)
            if getattr(self, f"appears_in_season_{season}")
        ]

    def __repr__(self):
        return f"<Character(id={self.id}, name='{self.name}', father_id={self.father_id}, mother_id={self.mother_id})>"
