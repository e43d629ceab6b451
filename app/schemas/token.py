from pydantic import BaseModel
from app.core.constants import RoleEnum

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class TokenPayload(BaseModel):
    user_id: int
    role: RoleEnum
    exp: int | None = None
