"""
Slug generation for links created without a custom slug.
"""

import random
import string


class RandomSlugGenerator:
    """
    Uniform random slug over [0-9a-zA-Z].

    No uniqueness check and no retry: a collision surfaces as a UNIQUE
    constraint violation at insert time and is reported as a conflict.
    With 4 characters there are 62^4 (~14.7M) slugs.
    """

    CHARACTERS = string.digits + string.ascii_lowercase + string.ascii_uppercase

    def __init__(self, length: int = 4):
        if length < 1:
            raise ValueError("Slug length must be positive")
        self.length = length

    def generate(self) -> str:
        return ''.join(random.choice(self.CHARACTERS) for _ in range(self.length))
