from lorebook.schemas.character import CharacterRow, normalize_header


def test_normalize_header_handles_spreadsheet_headers():
    assert normalize_header(" Name ") == "name"
    assert normalize_header("Image 1 Src") == "image_1_src"
    assert normalize_header("image-2-caption") == "image_2_caption"


def test_from_mapping_normalizes_headers_and_blanks():
    row = CharacterRow.from_mapping({"Name": " Rhaenys ", "Description": "   ", "Unknown Column": "x", None: ["extra"]})

    assert row.name == "Rhaenys"
    assert row.description is None


def test_season_flags_match_listed_seasons():
    flags = CharacterRow(seasons="2, 5 ,7 ,10").season_flags()

    assert [season for season, appears in flags.items() if appears] == [2, 5, 7]


def test_season_ten_does_not_flag_season_one():
    assert CharacterRow(seasons="10").season_flags()[1] is False
    assert CharacterRow(seasons="1,10").season_flags()[1] is True


def test_season_flags_without_seasons_are_all_false():
    flags = CharacterRow().season_flags()

    assert len(flags) == 9
    assert not any(flags.values())


def test_image_slots_follow_slot_order(valid_row):
    slots = CharacterRow.from_mapping(valid_row).image_slots()

    assert [position for position, _, _ in slots] == list(range(1, 9))
    assert slots[0] == (1, "http://source_of_image.com/image1.png", "image1_caption")


def test_image_slot_without_source_is_skipped(valid_row):
    valid_row["image_3_src"] = ""
    slots = CharacterRow.from_mapping(valid_row).image_slots()

    assert len(slots) == 7
    assert 3 not in [position for position, _, _ in slots]


def test_image_slot_without_caption_is_kept(valid_row):
    valid_row["image_1_caption"] = ""
    slots = CharacterRow.from_mapping(valid_row).image_slots()

    assert len(slots) == 8
    assert slots[0][2] is None


def test_character_attributes_keep_parent_names_as_text():
    attributes = CharacterRow(name="Jon", description="A bastard", father="Eddard Stark", seasons="1").character_attributes()

    assert attributes["father_name"] == "Eddard Stark"
    assert attributes["mother_name"] is None
    assert attributes["appears_in_season_1"] is True
    assert "house" not in attributes
    assert "seasons" not in attributes
