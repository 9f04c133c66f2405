from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from lorebook.database import Base

# Numbered image_N_src / image_N_caption column pairs accepted by the importer
IMAGE_SLOTS = 8

class Image(Base):
    """
    SQLAlchemy model for an image owned by a single character.
    Deleted together with its character.
    """
    __tablename__ = "images"

    id: int = Column(Integer, primary_key=True)
    character_id: int = Column(
        Integer,
        ForeignKey("characters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: int = Column(Integer, nullable=False)
    source: str = Column(String(1000), nullable=False)
    caption: str = Column(String(1000), nullable=True)

    character = relationship("Character", back_populates="images")

    def __repr__(self):
        return f"<Image(id={self.id}, character_id={self.character_id}, position={self.position})>"
