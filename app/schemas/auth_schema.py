from typing import Optional

from pydantic import BaseModel, EmailStr

# Modelo para cadastro e login
class AuthRequest(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = None
