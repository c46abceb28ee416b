"""Coupon code generation: a prefix from the campaign name plus a random tail."""

from __future__ import annotations

import secrets
from typing import Callable

KOREAN_CHARS = "가나다라마바사아자차카타파하"
NUMBER_CHARS = "0123456789"
CODE_LENGTH = 10
HANGUL_RANDOM_COUNT = 2
MAX_RETRIES = 100
DEFAULT_PREFIX = "쿠폰"


class CodeGenerationError(RuntimeError):
    """No unused coupon code could be produced."""


def _is_hangul_syllable(char: str) -> bool:
    return "가" <= char <= "힣"


class CouponCodeGenerator:
    """Builds ten-character coupon codes such as a Hangul prefix plus digits."""

    def __init__(self, korean_chars: str = KOREAN_CHARS, number_chars: str = NUMBER_CHARS):
        self._korean_chars = korean_chars
        self._number_chars = number_chars

    def generate_code(self, campaign_name: str) -> str:
        """Return a code made of a name-derived prefix and a random part."""
        prefix = self._extract_prefix(campaign_name)
        return prefix + self._random_part(CODE_LENGTH - len(prefix))

    def generate_unique_code(
        self, campaign_name: str, is_duplicate: Callable[[str], bool]
    ) -> str:
        """Return a code for which ``is_duplicate`` is false, trying a bounded number of times."""
        for _ in range(MAX_RETRIES):
            code = self.generate_code(campaign_name)
            if not is_duplicate(code):
                return code
        raise CodeGenerationError(
            f"쿠폰 코드 중복 방지를 위한 최대 시도 횟수({MAX_RETRIES}) 초과"
        )

    @staticmethod
    def _extract_prefix(campaign_name: str) -> str:
        hangul = [char for char in campaign_name if _is_hangul_syllable(char)]
        if not hangul:
            return DEFAULT_PREFIX
        if len(hangul) >= 3:
            return "".join(hangul[:3])
        if len(hangul) == 2:
            return "".join(hangul)
        return hangul[0] + "폰"

    def _random_part(self, length: int) -> str:
        hangul = (secrets.choice(self._korean_chars) for _ in range(HANGUL_RANDOM_COUNT))
        digits = (
            secrets.choice(self._number_chars)
            for _ in range(max(0, length - HANGUL_RANDOM_COUNT))
        )
        return "".join(hangul) + "".join(digits)