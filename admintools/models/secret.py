import string
from enum import Enum


class CharacterClass(str, Enum):
    """Named character sets used to enforce password composition."""

    LOWER = "lower"
    UPPER = "upper"
    DIGIT = "digit"
    SPECIAL = "special"

    @property
    def characters(self) -> str:
        return _ALPHABETS[self]

    def matches(self, char: str) -> bool:
        return char in _ALPHABETS[self]


# Quotes, backslash and backtick are left out so passwords survive shell quoting
_ALPHABETS = {
    CharacterClass.LOWER: string.ascii_lowercase,
    CharacterClass.UPPER: string.ascii_uppercase,
    CharacterClass.DIGIT: string.digits,
    CharacterClass.SPECIAL: "!#$%&()*+,-./:;<=>?@[]^_{|}~",
}

ALL_CLASSES = frozenset(CharacterClass)
