"""Constrained random password generation.

Passwords are built from an ordered list of character sets, each with a
minimum number of characters that must be drawn from it. The remaining
positions are filled from the combined pool and the whole buffer is put
through a Fisher-Yates shuffle so guaranteed characters do not sit in
predictable leading positions.

A fresh pseudo-random generator is seeded from the OS CSPRNG on every call.
"""

import random
import secrets
from dataclasses import dataclass, field
from typing import Callable, Iterable, MutableSequence, Optional, Union

from core.config import (
    DEFAULT_MIN_COUNT,
    DEFAULT_PASSWORD_LENGTH,
    DIGITS,
    LOWERCASE,
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    SEED_BYTES,
    SYMBOLS,
    UPPERCASE,
)
from core.errors import EntropyError, ValidationError

# Called with a byte count, returns that many unpredictable bytes
EntropySource = Callable[[int], bytes]


@dataclass(frozen=True)
class CharacterSet:
    """An alphabet and the minimum number of characters drawn from it."""
    chars: str
    min_count: int = DEFAULT_MIN_COUNT


@dataclass(frozen=True)
class GenerationSpec:
    """Length and character-class constraints for one password."""
    length: int
    character_sets: tuple[CharacterSet, ...] = field(default_factory=tuple)

    @classmethod
    def from_lists(
        cls,
        length: int,
        alphabets: Iterable[str],
        min_counts: Optional[Iterable[int]] = None,
    ) -> "GenerationSpec":
        """Pair alphabets with minimum counts given as separate lists.

        Args:
            length: Total password length
            alphabets: Character set strings, in order
            min_counts: Minimum count per alphabet (default: 1 each)

        Returns:
            GenerationSpec

        Raises:
            ValidationError: If the two lists differ in length
        """
        alphabets = list(alphabets)
        if min_counts is None:
            min_counts = [DEFAULT_MIN_COUNT] * len(alphabets)
        else:
            min_counts = list(min_counts)

        if len(alphabets) != len(min_counts):
            raise ValidationError(
                f"Got {len(alphabets)} character sets but {len(min_counts)} minimum counts."
            )

        return cls(
            length=length,
            character_sets=tuple(
                CharacterSet(chars, count) for chars, count in zip(alphabets, min_counts)
            ),
        )

    @classmethod
    def default(cls) -> "GenerationSpec":
        """Length 12 with at least one lowercase, uppercase, digit and symbol."""
        return cls.from_lists(
            DEFAULT_PASSWORD_LENGTH,
            [LOWERCASE, UPPERCASE, DIGITS, SYMBOLS],
        )

    @property
    def required_count(self) -> int:
        return sum(cs.min_count for cs in self.character_sets)

    @property
    def pool(self) -> str:
        return "".join(cs.chars for cs in self.character_sets)

    def validate(
        self,
        min_length: int = MIN_PASSWORD_LENGTH,
        max_length: int = MAX_PASSWORD_LENGTH,
    ) -> None:
        """Check the spec can be satisfied.

        Raises:
            ValidationError: On any malformed constraint
        """
        if not min_length <= self.length <= max_length:
            raise ValidationError(
                f"Password length must be between {min_length} and {max_length}, "
                f"got {self.length}."
            )
        if not self.character_sets:
            raise ValidationError("At least one character set is required.")

        for position, charset in enumerate(self.character_sets):
            if not charset.chars:
                raise ValidationError(f"Character set {position} is empty.")
            if charset.min_count < 0:
                raise ValidationError(
                    f"Character set {position} has a negative minimum count."
                )

        if self.required_count > self.length:
            raise ValidationError(
                f"Minimum counts add up to {self.required_count}, "
                f"more than the password length {self.length}."
            )


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a generation attempt: a password or the error that stopped it."""
    password: Optional[str] = None
    error: Optional[Union[ValidationError, EntropyError]] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        """Return the password or raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.password


def seed_random(entropy_source: Optional[EntropySource] = None) -> random.Random:
    """Create a PRNG seeded from a cryptographically secure source.

    Args:
        entropy_source: Byte source (default: secrets.token_bytes)

    Returns:
        Seeded random.Random instance

    Raises:
        EntropyError: If the source fails or returns too few bytes
    """
    source = entropy_source or secrets.token_bytes
    try:
        seed = source(SEED_BYTES)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"Secure random source unavailable: {e}") from e

    if seed is None or len(seed) < SEED_BYTES:
        raise EntropyError(
            f"Secure random source returned {0 if seed is None else len(seed)} "
            f"of {SEED_BYTES} seed bytes."
        )

    return random.Random(int.from_bytes(seed, "big"))


def fisher_yates_shuffle(buffer: MutableSequence, rng: random.Random) -> None:
    """Shuffle a buffer in place with an unbiased Fisher-Yates pass.

    Args:
        buffer: Sequence to permute
        rng: Random source for index selection
    """
    for i in range(len(buffer), 0, -1):
        j = rng.randrange(i)
        buffer[i - 1], buffer[j] = buffer[j], buffer[i - 1]


def generate_password(
    spec: Optional[GenerationSpec] = None,
    entropy_source: Optional[EntropySource] = None,
) -> str:
    """Generate a password honoring the spec's length and per-set minimums.

    Validation happens before any entropy is consumed.

    Args:
        spec: Generation constraints (default: GenerationSpec.default())
        entropy_source: Seed byte source (default: secrets.token_bytes)

    Returns:
        Generated password string

    Raises:
        ValidationError: If the spec is malformed
        EntropyError: If the secure source cannot seed the generator
    """
    spec = spec or GenerationSpec.default()
    spec.validate()

    rng = seed_random(entropy_source)

    # Guarantee each class its minimum
    password_chars = []
    for charset in spec.character_sets:
        password_chars.extend(rng.choice(charset.chars) for _ in range(charset.min_count))

    # Fill remaining length from combined pool
    pool = spec.pool
    password_chars.extend(rng.choice(pool) for _ in range(spec.length - len(password_chars)))

    fisher_yates_shuffle(password_chars, rng)

    return "".join(password_chars)


def try_generate_password(
    spec: Optional[GenerationSpec] = None,
    entropy_source: Optional[EntropySource] = None,
) -> GenerationResult:
    """Like generate_password, but report failures in the result instead of raising."""
    try:
        return GenerationResult(password=generate_password(spec, entropy_source))
    except (ValidationError, EntropyError) as e:
        return GenerationResult(error=e)
