from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from incidenthub.models.user import Role

class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    confirm_password: str

    @property
    def passwords_match(self) -> bool:
        return self.password == self.confirm_password

class Token(BaseModel):
    access_token: str
    token_type: str

class UserProfile(BaseModel):
    id: int
    username: str
    email: str
    role: Role
    enabled: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
