"""
Short code candidate strategies.
Uses Strategy Pattern to allow different generation algorithms.

A strategy only proposes candidates. Uniqueness is decided by the link
registry when the candidate is inserted.
"""

import secrets
import string
from abc import ABC, abstractmethod
from typing import Optional

from shortlink_app.errors import ExhaustedError


BASE62_CHARS = string.digits + string.ascii_lowercase + string.ascii_uppercase


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    # Whether candidates are derived from the registry's sequence counter
    uses_sequence = False

    def __init__(self, length: int):
        self.length = length

    @abstractmethod
    def generate(self, sequence: Optional[int] = None) -> str:
        """
        Propose a short code.

        Args:
            sequence: Next counter value, supplied only when uses_sequence is set

        Returns:
            A candidate code of exactly ``length`` Base62 characters
        """
        pass


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Random candidates drawn from the Base62 alphabet.

    Pros: Unpredictable, no shared state
    Cons: Collisions possible (retried by the generator)
    """

    def __init__(self, length: int = 7):
        super().__init__(length)
        self.characters = BASE62_CHARS

    def generate(self, sequence: Optional[int] = None) -> str:
        return "".join(secrets.choice(self.characters) for _ in range(self.length))


class Base62ShortCodeStrategy(ShortCodeStrategy):
    """
    Counter-derived candidates: Base62 of (sequence + salt), left-padded.

    Pros: No collisions between generated codes
    Cons: Predictable if salt is known (but obfuscated); a custom alias can
    still occupy a future value, in which case the generator retries
    """

    uses_sequence = True

    def __init__(self, salt: int = 1000, length: int = 7):
        super().__init__(length)
        self.salt = salt

    def generate(self, sequence: Optional[int] = None) -> str:
        """
        Encode the salted sequence value.

        Raises:
            ValueError: If no sequence value is supplied
            ExhaustedError: If the encoding no longer fits in ``length``
        """
        if sequence is None:
            raise ValueError("Base62 strategy requires a sequence value")

        encoded = base62_encode(sequence + self.salt)

        # Truncating would produce duplicates, so running out of length is fatal
        if len(encoded) > self.length:
            raise ExhaustedError(
                f"Short code keyspace exhausted: sequence {sequence} does not fit "
                f"in {self.length} characters"
            )

        return encoded.rjust(self.length, BASE62_CHARS[0])


def base62_encode(number: int) -> str:
    """
    Convert a non-negative integer to Base62.

    Base62 uses: 0-9 (10) + a-z (26) + A-Z (26) = 62 characters
    """
    if number < 0:
        raise ValueError("Cannot encode negative numbers")

    if number == 0:
        return BASE62_CHARS[0]

    result = ""
    while number > 0:
        result = BASE62_CHARS[number % 62] + result
        number //= 62

    return result
