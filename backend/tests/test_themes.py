from slide_studio.services.themes import DEFAULT_THEMES, get_theme, is_known_theme


def test_theme_ids_are_normalized():
    assert is_known_theme(" Dark")
    assert get_theme(" Dark").id == "dark"


def test_unknown_theme_uses_default():
    assert not is_known_theme("neon")
    assert get_theme("neon", default="nature").id == "nature"


def test_bad_default_falls_back_to_first_theme():
    assert get_theme("neon", default="missing") == DEFAULT_THEMES[0]
    assert get_theme(None, default="missing").id == "clean"
