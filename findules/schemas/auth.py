from pydantic import BaseModel, Field

from findules.schemas.users import UserRead


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)
