import pytest

from kes.cmd.color import ColorOption
from kes.terminal import ColorProfile, color_profile, is_terminal, set_color_profile


@pytest.fixture(autouse=True)
def restore_profile():
    previous = color_profile()
    yield
    set_color_profile(previous)


def test_default_follows_terminal():
    option = ColorOption()
    assert str(option) == ""
    assert option.colorize() == is_terminal()


def test_never_disables_colors():
    set_color_profile(ColorProfile.TRUECOLOR)
    option = ColorOption()
    option.set("never")
    assert str(option) == "never"
    assert option.colorize() is False
    assert color_profile() is ColorProfile.ASCII


def test_always_upgrades_ascii_profile():
    set_color_profile(ColorProfile.ASCII)
    option = ColorOption()
    option.set("always")
    assert option.colorize() is True
    assert color_profile() is ColorProfile.ANSI256


def test_always_keeps_richer_profile_and_case():
    set_color_profile(ColorProfile.TRUECOLOR)
    option = ColorOption()
    option.set("ALWAYS")
    assert str(option) == "ALWAYS"
    assert option.colorize() is True
    assert color_profile() is ColorProfile.TRUECOLOR


@pytest.mark.parametrize("value", ["auto", "AUTO", ""])
def test_auto_follows_terminal(value):
    set_color_profile(ColorProfile.ASCII)
    option = ColorOption()
    option.set(value)
    assert str(option) == value
    assert option.colorize() == is_terminal()
    assert color_profile() is ColorProfile.ASCII


def test_invalid_value_rejected():
    option = ColorOption("never")
    with pytest.raises(ValueError, match="invalid color option"):
        option.set("sometimes")
    assert str(option) == "never"