from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class User(BaseModel):
    username: str
    password: str = ""          # pbkdf2_sha256$... or legacy cleartext
    email: str = ""
    address: str = ""
    phone: str = ""
    created_at: Optional[datetime] = None
