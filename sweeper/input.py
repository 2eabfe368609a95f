from __future__ import annotations

from enum import Enum


class Button(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class Click(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    CHORD = "chord"
    NONE = "none"


class InputClassifier:
    """Board-wide button state for telling single clicks from chords."""

    def __init__(self) -> None:
        self.primary = False
        self.secondary = False

    @property
    def both_held(self) -> bool:
        return self.primary and self.secondary

    def press(self, button: Button) -> bool:
        """Record a press; True once both buttons are down."""
        if button == Button.PRIMARY:
            self.primary = True
        else:
            self.secondary = True
        return self.both_held

    def release(self) -> Click:
        """Classify by what was held at release time, then clear both."""
        if self.both_held:
            kind = Click.CHORD
        elif self.primary:
            kind = Click.PRIMARY
        elif self.secondary:
            kind = Click.SECONDARY
        else:
            kind = Click.NONE
        self.clear()
        return kind

    def clear(self) -> None:
        self.primary = False
        self.secondary = False
