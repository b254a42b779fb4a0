from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from dentflow.models.user import RoleEnum

class RegisterIn(BaseModel):
    username: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=7)
    password: str = Field(..., min_length=6)

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class ChangePasswordIn(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)

class UserOut(BaseModel):
    id: str
    username: str
    email: EmailStr
    phone: str | None = None
    role: RoleEnum
    is_active: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"

class LoginOut(TokenOut):
    user: UserOut
