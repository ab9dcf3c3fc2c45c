"""
Registration and login against the credential store.

Both entry points take the raw request fields as a dict (JSON or form
decoded) and raise errors.AccountError subclasses on failure. The server only
checks that required fields are non-empty; length and format rules live in
the browser (public/script.js).
"""

import logging
from datetime import datetime, timezone
from typing import Any

from errors import Conflict, InvalidCredentials, StorageFailure, ValidationFailed
from models.user import User
from passwords import DEFAULT_ITERATIONS, hash_password, verify_password
from store import CredentialStore

logger = logging.getLogger(__name__)


def _field(data: dict, name: str, strip: bool = True) -> str:
    value = data.get(name)
    if not value:
        return ""
    text = str(value)
    return text.strip() if strip else text


def register_user(
    store: CredentialStore,
    data: dict[str, Any],
    iterations: int = DEFAULT_ITERATIONS,
) -> User:
    """
    Validate and persist a new user.

    Username conflicts are checked before email conflicts, so a candidate
    that clashes on both reports the username.
    """
    username = _field(data, "username")
    password = _field(data, "password", strip=False)
    email = _field(data, "email")
    address = _field(data, "address")
    phone = _field(data, "phone")

    if not username or not password or not email:
        raise ValidationFailed("Missing fields")

    if store.find(lambda u: u.username == username) is not None:
        raise Conflict("Username already exists")
    if store.find(lambda u: u.email == email) is not None:
        raise Conflict("Email already exists")

    user = User(
        username=username,
        password=hash_password(password, iterations),
        email=email,
        address=address,
        phone=phone,
        created_at=datetime.now(timezone.utc),
    )
    if not store.append(user):
        raise StorageFailure("Failed to save user")

    logger.info("Registered user %r", username)
    return user


def authenticate(store: CredentialStore, data: dict[str, Any]) -> User:
    """Return the user matching username and password, or raise InvalidCredentials."""
    username = _field(data, "username")
    password = _field(data, "password", strip=False)

    if not username or not password:
        raise ValidationFailed("Missing fields")

    user = store.find(
        lambda u: u.username == username and verify_password(password, u.password)
    )
    if user is None:
        logger.warning("Failed login for %r", username)
        raise InvalidCredentials("Invalid credentials")

    return user
