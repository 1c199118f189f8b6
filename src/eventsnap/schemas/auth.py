from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    display_name: str | None = Field(None, max_length=100)


class RegisterResponse(BaseModel):
    id: str
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    id: str
    email: EmailStr
    is_admin: bool = False
    tokens: TokenPair


class RefreshRequest(BaseModel):
    refresh_token: str


class HostLoginRequest(BaseModel):
    event_id: str
    password: str = Field(min_length=1, max_length=128)


class HostLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    public_event_id: str
    event_title: str


class MeResponse(BaseModel):
    id: str | None = None
    email: EmailStr | None = None
    display_name: str | None = None
    role: str
    event_id: str | None = None
