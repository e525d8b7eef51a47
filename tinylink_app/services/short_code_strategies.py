"""
Short code generation strategies for TinyLink.
Uses Strategy Pattern to allow different generation algorithms.
"""

import string
import random
from abc import ABC, abstractmethod
from typing import Optional

from tinylink_app.services.validators import MIN_CODE_LENGTH, MAX_CODE_LENGTH


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    @abstractmethod
    def generate(self) -> str:
        """
        Generate a candidate short code.

        Strategies know nothing about existing codes; the caller handles
        collisions.

        Returns:
            A code that passes is_valid_code()
        """
        pass


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Random generation strategy.

    Picks a length uniformly from [min_length, max_length], then draws every
    character independently and uniformly from the 62 alphanumerics.

    Pros: Simple, unpredictable, no DB round trip
    Cons: Collisions are possible, so the caller must retry
    """

    CHARACTERS = string.ascii_letters + string.digits

    def __init__(
        self,
        min_length: int = MIN_CODE_LENGTH,
        max_length: int = MAX_CODE_LENGTH,
        rng: Optional[random.Random] = None
    ):
        if not 0 < min_length <= max_length:
            raise ValueError(f"Invalid code length range: {min_length}-{max_length}")
        self.min_length = min_length
        self.max_length = max_length
        # Not a security boundary; a seeded Random makes tests reproducible
        self.rng = rng or random.Random()

    def generate(self) -> str:
        """Generate random short code"""
        length = self.rng.randint(self.min_length, self.max_length)
        return ''.join(self.rng.choice(self.CHARACTERS) for _ in range(length))
