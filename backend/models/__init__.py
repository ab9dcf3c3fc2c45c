from models.session import Session
from models.user import User

__all__ = ["Session", "User"]
