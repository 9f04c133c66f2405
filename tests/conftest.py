import itertools

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lorebook.database import Base, create_db_engine
from lorebook.models import Character, House
from lorebook.services.characters import CharacterService
from lorebook.services.importer import ImporterService
from lorebook.services.relationships import RelationshipService


@pytest.fixture
def engine():
    db_engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=db_engine)
    yield db_engine
    Base.metadata.drop_all(bind=db_engine)
    db_engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def character_service(db):
    return CharacterService(db)


@pytest.fixture
def relationship_service(db, character_service):
    return RelationshipService(db, character_service)


@pytest.fixture
def importer(db, character_service, relationship_service):
    return ImporterService(db, character_service, relationship_service)


@pytest.fixture
def house(db):
    targaryen = House(name="House Targaryen", description="Dragonlords of Old Valyria.", words="Fire and Blood")
    db.add(targaryen)
    db.commit()
    return targaryen


@pytest.fixture
def make_character(db, relationship_service):
    """Creates a character and links its parents by name, like an import does."""
    counter = itertools.count(1)

    def _make(name=None, description="A character of the realm.", **attributes):
        character = Character(
            name=name or f"Character {next(counter)}",
            description=description,
            **attributes,
        )
        db.add(character)
        db.commit()
        return relationship_service.link_parents(character)

    return _make


@pytest.fixture
def valid_row():
    row = {
        "name": "Vermithrax",
        "description": "Vermithrax was a dragon who was bred by House Targaryen.",
        "biography": "", "personality": "", "seasons": "2, 5 ,7 ,10",
        "titles": "", "status": "", "death": "", "origin": "", "allegiance": "",
        "culture": "", "religion": "", "predecessor": "", "successor": "",
        "father": "", "mother": "", "spouse": "", "children": "",
        "siblings": "", "lovers": "",
        "house": "House Targaryen",
    }
    for slot in range(1, 9):
        row[f"image_{slot}_src"] = f"http://source_of_image.com/image{slot}.png"
        row[f"image_{slot}_caption"] = f"image{slot}_caption"
    return row
