import re
from functools import lru_cache
from typing import NamedTuple

import bcrypt

from core.config import settings

# 흔히 쓰이는 비밀번호: 대소문자 무시 완전일치
COMMON_PASSWORDS = frozenset({
    "password",
    "123456",
    "123456789",
    "qwerty",
    "abc123",
    "password123",
    "admin",
    "letmein",
    "welcome",
    "12345678",
})

MIN_LENGTH = 8
SPECIAL_CHARACTERS = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

# bcrypt는 72바이트까지만 사용
BCRYPT_MAX_BYTES = 72


class StrengthResult(NamedTuple):
    valid: bool
    violations: list[str]


class PasswordService:
    """bcrypt 해싱 + 비밀번호 강도 검사. 인스턴스 상태는 work factor 뿐."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(plain_password), salt).decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8"))
        except ValueError:
            # 해시 형식이 깨진 경우
            return False

    @staticmethod
    def check_strength(plain_password: str) -> StrengthResult:
        """
        위반한 규칙 전부를 돌려줌

        첫 번째 위반에서 멈추지 않는다: 클라이언트가 목록 전체를 보여줌.
        """
        violations: list[str] = []

        if len(plain_password) < MIN_LENGTH:
            violations.append(f"Password must be at least {MIN_LENGTH} characters long")
        if not re.search(r"[A-Z]", plain_password):
            violations.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", plain_password):
            violations.append("Password must contain at least one lowercase letter")
        if not re.search(r"\d", plain_password):
            violations.append("Password must contain at least one number")
        if not SPECIAL_CHARACTERS.search(plain_password):
            violations.append("Password must contain at least one special character")
        if plain_password.lower() in COMMON_PASSWORDS:
            violations.append("Password is too common. Please choose a more secure password")

        return StrengthResult(valid=not violations, violations=violations)


def _encode(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


@lru_cache
def get_password_service() -> PasswordService:
    """앱 시작 시 설정값으로 한 번만 생성 (테스트에서는 dependency_overrides로 교체)"""
    return PasswordService(rounds=settings.bcrypt_rounds)
