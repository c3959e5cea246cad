"""
Password, PIN and passphrase generation.

The default random source is secrets.SystemRandom. Tests and callers that
need reproducible output can pass any random.Random instance as ``rng``;
a seeded Random must never be used for real credentials.
"""
import logging
import random
import secrets
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from admintools.errors import GenerationError
from admintools.models.secret import ALL_CLASSES, CharacterClass

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10000


def _normalize_classes(classes: Iterable) -> List[CharacterClass]:
    if isinstance(classes, str):
        # A single name or CharacterClass, not a string of class names
        classes = [classes]
    normalized: List[CharacterClass] = []
    for item in classes:
        try:
            cls = item if isinstance(item, CharacterClass) else CharacterClass(str(item).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(c.value for c in CharacterClass)
            raise ValueError(f"Unknown character class {item!r}; expected one of {allowed}") from exc
        if cls not in normalized:
            normalized.append(cls)
    # Stable order keeps seeded output independent of how classes were passed
    return sorted(normalized, key=list(CharacterClass).index)


def _build_alphabet(classes: Sequence[CharacterClass]) -> str:
    seen = []
    for cls in classes:
        for char in cls.characters:
            if char not in seen:
                seen.append(char)
    return "".join(seen)


def _draw(alphabet: str, length: int, no_adjacent_repeat: bool, rng: random.Random) -> str:
    chars: List[str] = []
    while len(chars) < length:
        char = rng.choice(alphabet)
        if no_adjacent_repeat and chars and chars[-1] == char:
            continue
        chars.append(char)
    return "".join(chars)


def generate_password(
    length: int = 12,
    classes: Optional[Iterable] = None,
    no_adjacent_repeat: bool = False,
    rng: Optional[random.Random] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """
    Generate a random string of ``length`` characters.

    Every position is drawn uniformly from the union of the requested
    character classes. With ``no_adjacent_repeat`` a character equal to its
    predecessor is redrawn in place. A candidate missing any requested class
    is thrown away and drawn again, at most ``max_attempts`` times.

    Raises ValueError for impossible parameters and GenerationError if no
    valid candidate was found within ``max_attempts``.
    """
    required = _normalize_classes(ALL_CLASSES if classes is None else classes)

    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise ValueError(f"Length must be a positive integer, got {length!r}")
    if not required:
        raise ValueError("At least one character class is required")
    if length < len(required):
        raise ValueError(
            f"Length {length} is too short to contain all {len(required)} requested character classes"
        )
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    alphabet = _build_alphabet(required)
    if no_adjacent_repeat and len(alphabet) < 2 and length > 1:
        raise ValueError("no_adjacent_repeat needs an alphabet of at least two characters")

    rng = rng or secrets.SystemRandom()

    for attempt in range(1, max_attempts + 1):
        candidate = _draw(alphabet, length, no_adjacent_repeat, rng)
        if all(any(cls.matches(c) for c in candidate) for cls in required):
            if attempt > 1:
                logger.debug("Password accepted after %d attempts", attempt)
            return candidate

    names = ", ".join(cls.value for cls in required)
    raise GenerationError(
        f"Could not generate a {length}-character string containing every class ({names}) "
        f"within {max_attempts} attempts"
    )


def generate_pin(length: int = 4, rng: Optional[random.Random] = None) -> str:
    """Numeric PIN of the given length."""
    return generate_password(length, [CharacterClass.DIGIT], rng=rng)


def load_word_list(path) -> List[str]:
    """Read one word per line, ignoring blank lines and '#' comments."""
    words = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        word = line.strip()
        if word and not word.startswith("#"):
            words.append(word)
    return words


def generate_passphrase(
    words: Sequence[str],
    word_count: int = 4,
    separator: str = "-",
    capitalize: bool = False,
    append_digit: bool = False,
    min_word_length: int = 3,
    max_word_length: int = 10,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Join ``word_count`` words picked from ``words``.

    Words outside the length bounds are ignored. The same word is never
    picked twice in a row; a pool with a single distinct word is therefore
    only usable for one-word passphrases.
    """
    if word_count < 1:
        raise ValueError(f"word_count must be at least 1, got {word_count}")

    pool = sorted({w.lower(): w for w in words if min_word_length <= len(w) <= max_word_length}.values())
    if not pool:
        raise ValueError(
            f"No words between {min_word_length} and {max_word_length} characters in the word list"
        )
    if len(pool) < 2 and word_count > 1:
        raise ValueError("At least two distinct words are needed for a multi-word passphrase")

    rng = rng or secrets.SystemRandom()

    picked: List[str] = []
    while len(picked) < word_count:
        word = rng.choice(pool)
        if picked and picked[-1] == word:
            continue
        picked.append(word)

    if capitalize:
        picked = [w[:1].upper() + w[1:] for w in picked]
    phrase = separator.join(picked)
    if append_digit:
        phrase += str(rng.randrange(10))
    return phrase
