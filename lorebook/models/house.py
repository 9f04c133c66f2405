from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lorebook.database import Base

class House(Base):
    """
    A named grouping characters optionally belong to.
    Characters are matched to a house by exact name during import.
    """
    __tablename__ = "houses"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    background = Column(Text, nullable=True)
    words = Column(String(255), nullable=True)
    seat = Column(String(255), nullable=True)
    region = Column(String(255), nullable=True)
    lord = Column(String(255), nullable=True)
    religion = Column(String(255), nullable=True)
    sigil = Column(Text, nullable=True)
    sigil_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    characters = relationship("Character", back_populates="house")

    def __repr__(self):
        return f"<House(id={self.id}, name='{self.name}')>"
