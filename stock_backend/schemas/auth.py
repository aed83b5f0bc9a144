from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$", description="User email.")
    password: str = Field(..., min_length=8, description="Plaintext password (8+ characters).")


class LoginRequest(BaseModel):
    email: str = Field(..., description="User email.")
    password: str = Field(..., description="Plaintext password.")


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token issued at login.")


class LogoutRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token to revoke.")


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int = Field(..., description="Access token lifetime in seconds.")
    token_type: str = "Bearer"


class RefreshResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int


class MessageResponse(BaseModel):
    message: str
