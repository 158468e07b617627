from invitekit.canvas_sizes import DEFAULT_SIZE, default_positions, get_size_by_key


def test_get_size_by_key_falls_back_to_portrait() -> None:
    assert get_size_by_key("square").width == 600
    assert get_size_by_key("story").height == 960
    assert get_size_by_key("unknown") is DEFAULT_SIZE
    assert DEFAULT_SIZE.key == "portrait"


def test_default_positions_for_portrait() -> None:
    assert default_positions(450, 800) == {
        "titleX": 225,
        "titleY": 224,
        "nameX": 225,
        "nameY": 320,
        "dateX": 225,
        "dateY": 416,
    }
