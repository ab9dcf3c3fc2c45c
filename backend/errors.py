"""
Account error taxonomy.

Each error knows the HTTP status it maps to and carries a human-readable
message. main.py renders them as {"success": false, "message": ...}.
"""

from typing import Optional


class AccountError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(AccountError):
    status_code = 400
    default_message = "Missing fields"


class InvalidBody(AccountError):
    status_code = 400
    default_message = "Invalid JSON"


class InvalidCredentials(AccountError):
    status_code = 401
    default_message = "Invalid credentials"


class Conflict(AccountError):
    status_code = 409
    default_message = "Already exists"


class StorageFailure(AccountError):
    status_code = 500
    default_message = "Failed to save user"
