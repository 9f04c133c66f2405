# lorebook/models/__init__.py

from lorebook.database import Base

from .house import House
from .characters import Character, SEASON_COUNT
from .image import Image, IMAGE_SLOTS
