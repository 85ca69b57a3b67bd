from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from schemas.common import CamelModel

class UserCreate(BaseModel):
    """회원가입 요청: 비밀번호 강도는 서비스에서 규칙 전체를 검사"""
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class UserCreated(CamelModel):
    """가입 직후 돌려줄 공개 필드 (비밀번호 제외!)"""
    id: int
    username: str
    email: str
    role: str
    created_at: datetime


class UserSummary(CamelModel):
    """로그인 응답에 포함되는 최소 정보"""
    id: int
    username: str
    email: str
    role: str


class UserProfile(CamelModel):
    """프로필 조회용: 민감 필드(해시, 잠금 상태, 로그인 IP) 제외"""
    id: int
    username: str
    email: str
    role: str
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class CurrentUser(BaseModel):
    """인증 미들웨어가 핸들러에 넘기는 요청 단위 신원 정보"""
    user_id: int
    username: str
    role: str


class LoginData(CamelModel):
    user: UserSummary
    access_token: str


class AccessTokenData(CamelModel):
    access_token: str


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "User registered successfully"
    data: UserCreated


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    data: LoginData


class RefreshResponse(BaseModel):
    success: bool = True
    data: AccessTokenData


class ProfileResponse(BaseModel):
    success: bool = True
    data: UserProfile
