from sqlalchemy.orm import Session

from lorebook.services.characters import CharacterService
from lorebook.services.importer import ImporterService
from lorebook.services.relationships import RelationshipService

def get_character_service(db: Session) -> CharacterService:
    """
    Provides a CharacterService bound to the given session.

    Args:
        db (Session): SQLAlchemy database session from get_db.

    Returns:
        CharacterService: A new instance of the character service.
    """
    return CharacterService(db=db)

def get_relationship_service(db: Session) -> RelationshipService:
    """
    Provides a RelationshipService bound to the given session.

    Args:
        db (Session): SQLAlchemy database session from get_db.

    Returns:
        RelationshipService: A new instance sharing a character service on the same session.
    """
    return RelationshipService(db=db, character_service=get_character_service(db))

def get_importer_service(db: Session) -> ImporterService:
    """
    Provides an ImporterService whose character and relationship services
    share the same session, so a row and its parent links are written
    through one unit of work.
    """
    character_service = get_character_service(db)
    return ImporterService(
        db=db,
        character_service=character_service,
        relationship_service=RelationshipService(db=db, character_service=character_service),
    )
