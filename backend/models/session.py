from datetime import datetime
from pydantic import BaseModel, ConfigDict


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    username: str
    expires_at: datetime
