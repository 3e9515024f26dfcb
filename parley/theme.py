"""Colour theme of the interface and how it is stored and applied."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

DARK_CLASS = "dark"


class Theme(Enum):
    """Light, dark or following the system setting."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"

    @classmethod
    def from_storage(cls, value: Optional[str]) -> "Theme":
        """Read a stored theme name; anything unknown means SYSTEM."""
        if value == "dark":
            return cls.DARK
        if value == "light":
            return cls.LIGHT
        return cls.SYSTEM


def theme_from_toggle(checked: Union[bool, str]) -> Theme:
    """Theme chosen by the dark-mode checkbox."""
    if isinstance(checked, str):
        checked = checked == "true"
    return Theme.DARK if checked else Theme.LIGHT


def html_classes(theme: Theme) -> frozenset[str]:
    """Classes to put on the root HTML element for this theme."""
    return frozenset({DARK_CLASS}) if theme is Theme.DARK else frozenset()