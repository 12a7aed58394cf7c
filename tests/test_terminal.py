import re

import pytest

from kes.terminal import (
    Buffer,
    ColorProfile,
    Style,
    check,
    checkf,
    color_profile,
    fatal,
    fatalf,
    fg,
    set_color_profile,
)

ANSI = re.compile(r"\x1b\[[0-9;]*m")


@pytest.fixture
def profile():
    previous = color_profile()

    def use(p):
        set_color_profile(p)

    yield use
    set_color_profile(previous)


def test_render_ascii_is_plain(profile):
    profile(ColorProfile.ASCII)
    style = Style(foreground="#ac0000", bold=True, underline=True)
    assert style.render("Error: ") == "Error: "


@pytest.mark.parametrize("p", [ColorProfile.ANSI256, ColorProfile.TRUECOLOR])
def test_render_colored_wraps_text(profile, p):
    profile(p)
    rendered = Style(foreground="#2e42d1", bold=True).render("Identity")
    assert rendered.startswith("\x1b[")
    assert "Identity" in rendered
    assert ANSI.sub("", rendered) == "Identity"


def test_render_plain_style_unchanged_with_colors(profile):
    profile(ColorProfile.TRUECOLOR)
    assert Style().render("Key") == "Key"


def test_render_invalid_color(profile):
    profile(ColorProfile.TRUECOLOR)
    with pytest.raises(ValueError):
        Style(foreground="#zzzzzz").render("x")


def test_fg_holds_value(profile):
    profile(ColorProfile.ASCII)
    style = fg("#00ff00", "Hello", "World")
    assert str(style) == "Hello World"
    assert style.render("!") == "Hello World !"


def test_fg_colored_strips_to_value(profile):
    profile(ColorProfile.ANSI256)
    assert ANSI.sub("", str(fg("#00ff00", "Hello"))) == "Hello"


def test_buffer_sprint_spacing():
    buf = Buffer().sprint("a", "b").sprint(1, 2)
    assert str(buf) == "ab1 2"


def test_buffer_sprintln_and_sprintf():
    buf = Buffer().sprintln("a", 1).sprintf("%-5s|", "x")
    assert str(buf) == "a 1\nx    |"


def test_buffer_stylef_matches_sprintf_in_ascii(profile):
    profile(ColorProfile.ASCII)
    style = Style(bold=True)
    styled = Buffer().stylef(style, "%s=%d", "n", 3)
    plain = Buffer().sprintf("%s=%d", "n", 3)
    assert str(styled) == str(plain)


def test_buffer_styleln_appends_newline(profile):
    profile(ColorProfile.TRUECOLOR)
    text = str(Buffer().styleln(Style(underline=True), "Key"))
    assert text.endswith("\n")
    assert ANSI.sub("", text) == "Key\n"


def test_buffer_write_returns_length():
    buf = Buffer()
    assert buf.write("hello") == len("hello")
    buf.write(" there")
    assert str(buf) == "hello there"


def test_fatal_exits_with_status_one(profile, capsys):
    profile(ColorProfile.ASCII)
    with pytest.raises(SystemExit) as info:
        fatal("too many arguments")
    assert info.value.code == 1
    assert capsys.readouterr().err == "Error: too many arguments\n"


def test_fatalf_formats_message(profile, capsys):
    profile(ColorProfile.ASCII)
    with pytest.raises(SystemExit) as info:
        fatalf("failed to create key %r", "my-key")
    assert info.value.code == 1
    assert "failed to create key 'my-key'" in capsys.readouterr().err


def test_check_passes_silently(capsys):
    check(True, "never shown")
    checkf(True, "never %s", "shown")
    assert capsys.readouterr().err == ""


def test_check_false_exits(profile, capsys):
    profile(ColorProfile.ASCII)
    with pytest.raises(SystemExit):
        check(False, "boom")
    assert "boom" in capsys.readouterr().err


def test_checkf_false_exits(profile, capsys):
    profile(ColorProfile.ASCII)
    with pytest.raises(SystemExit) as info:
        checkf(False, "bad %s", "input")
    assert info.value.code == 1
    assert "bad input" in capsys.readouterr().err