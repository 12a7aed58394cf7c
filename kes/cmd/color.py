"""The --color command line option."""

from __future__ import annotations

from dataclasses import dataclass

from kes.terminal import ColorProfile, color_profile, is_terminal, set_color_profile


@dataclass
class ColorOption:
    """Controls output colorization: 'always', 'auto' (default) or 'never'."""

    value: str = ""

    def set(self, value: str) -> None:
        """Set the option, adjusting the color profile.

        Raises ValueError for an unknown value.
        """
        choice = value.lower()
        if choice == "always":
            if color_profile() is ColorProfile.ASCII:
                set_color_profile(ColorProfile.ANSI256)
        elif choice == "never":
            set_color_profile(ColorProfile.ASCII)
        elif choice not in ("auto", ""):
            raise ValueError("invalid color option")
        self.value = value

    def colorize(self) -> bool:
        """Report whether output should be colored."""
        choice = self.value.lower()
        return choice == "always" or (choice in ("auto", "") and is_terminal())

    def __str__(self) -> str:
        return self.value