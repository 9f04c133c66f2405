from lorebook.presenters.character import NONE_OR_UNKNOWN, UNKNOWN, CharacterPresenter


def test_father_is_unknown_without_name(relationship_service, make_character):
    character = make_character(name="Snow")

    assert CharacterPresenter(character, relationship_service).father() == UNKNOWN


def test_parent_falls_back_to_imported_name(relationship_service, make_character):
    character = make_character(name="Lola", mother_name="Lola Flores")

    assert CharacterPresenter(character, relationship_service).mother() == "Lola Flores"


def test_parent_uses_linked_record(relationship_service, make_character):
    make_character(name="Paco de Lucía")
    character = make_character(name="Paquito", father_name="Paco de Lucía")

    presenter = CharacterPresenter(character, relationship_service)

    assert presenter.father() == "Paco de Lucía"
    assert character.father is not None


def test_empty_relatives_show_placeholder(relationship_service, make_character):
    presenter = CharacterPresenter(make_character(name="Alone"), relationship_service)

    assert presenter.children() == NONE_OR_UNKNOWN
    assert presenter.grandparents() == NONE_OR_UNKNOWN
    assert presenter.cousins() == NONE_OR_UNKNOWN


def test_summary_lists_relative_names(relationship_service, make_character, house):
    parent = make_character(name="Parent", house=house)
    make_character(name="Child One", father_name="Parent")
    make_character(name="Child Two", mother_name="Parent")

    summary = CharacterPresenter(parent, relationship_service).summary()

    assert summary["house"] == "House Targaryen"
    assert set(summary["children"]) == {"Child One", "Child Two"}
    assert summary["siblings"] == NONE_OR_UNKNOWN
    assert summary["father"] == UNKNOWN


def test_children_fall_back_to_free_text(relationship_service, make_character):
    character = make_character(name="Tywin", children="Jaime, Cersei , Tyrion")

    assert CharacterPresenter(character, relationship_service).children() == ["Jaime", "Cersei", "Tyrion"]


def test_siblings_fall_back_to_free_text(relationship_service, make_character):
    character = make_character(name="Jaime", siblings="Cersei, Tyrion")

    assert set(CharacterPresenter(character, relationship_service).siblings()) == {"Cersei", "Tyrion"}


def test_linked_children_take_precedence_over_free_text(relationship_service, make_character):
    father = make_character(name="Tywin", children="Jaime, Cersei, Tyrion")
    make_character(name="Jaime", father_name="Tywin")

    assert CharacterPresenter(father, relationship_service).children() == ["Jaime"]
