from pydantic import BaseModel, EmailStr, Field
from typing import Optional

class UserBase(BaseModel):
    """Base user schema with fields common to all user-related operations."""
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = True

class UserCreate(UserBase):
    """Schema for creating a new user. Inherits base fields and makes some required."""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    is_admin: bool = False

class User(UserBase):
    """Schema for a user object as returned by the API."""
    id: int
    is_admin: bool

    class Config:
        from_attributes = True

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
