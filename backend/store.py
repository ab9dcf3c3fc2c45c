"""
Credential store: newline-delimited JSON user records.

The users file is append-only while the server runs. compact() rewrites it
once at startup, keeping only lines that are JSON objects with a username,
and load() rebuilds the in-memory index that find() scans. Writers are not
synchronised; two processes appending to the same file may interleave.
"""

import json
import logging
import os
from typing import Callable, Iterator, Optional

from pydantic import ValidationError

from models.user import User

logger = logging.getLogger(__name__)


def _read_lines(path: str) -> list[Optional[str]]:
    """Lines of the file, with None in place of any line that is not valid UTF-8."""
    with open(path, "rb") as f:
        raw_lines = f.read().split(b"\n")

    lines: list[Optional[str]] = []
    for raw in raw_lines:
        try:
            lines.append(raw.decode("utf-8"))
        except UnicodeDecodeError:
            lines.append(None)
    return lines


def _parse_record(line: Optional[str]) -> Optional[dict]:
    """Return the JSON object on this line, or None if it is malformed or keyless."""
    if line is None:
        return None
    try:
        record = json.loads(line)
    except ValueError:
        return None
    if not isinstance(record, dict) or not record.get("username"):
        return None
    return record


def _fallback_user(record: dict) -> User:
    """
    Index a keyed record that does not validate as a User.

    Only string fields are carried over, so the record still reserves its
    username and email but can never match a password.
    """
    def text(name: str) -> str:
        value = record.get(name)
        return value if isinstance(value, str) else ""

    username = record["username"]
    return User(
        username=username if isinstance(username, str) else json.dumps(username),
        email=text("email"),
        address=text("address"),
        phone=text("phone"),
    )


class CredentialStore:
    def __init__(self, path: str):
        self.path = path
        self._users: list[User] = []

    def __len__(self) -> int:
        return len(self._users)

    def __iter__(self) -> Iterator[User]:
        return iter(list(self._users))

    def find(self, predicate: Callable[[User], bool]) -> Optional[User]:
        for user in self._users:
            if predicate(user):
                return user
        return None

    def append(self, user: User) -> bool:
        """
        Write one record to the end of the file.

        Returns False if the write fails; the index is only updated once the
        line has been written.
        """
        line = user.model_dump_json() + "\n"
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError:
            logger.exception("Failed to append user %r to %s", user.username, self.path)
            return False

        self._users.append(user)
        return True

    def compact(self) -> None:
        """
        Rewrite the file without malformed, keyless or non-UTF-8 lines.
        A missing file is left alone.
        """
        if not os.path.isfile(self.path):
            return

        try:
            lines = [line for line in _read_lines(self.path) if line is None or line.strip()]

            kept = []
            for line in lines:
                record = _parse_record(line)
                if record is not None:
                    kept.append(json.dumps(record, separators=(",", ":")))

            with open(self.path, "w", encoding="utf-8") as f:
                f.write("\n".join(kept) + ("\n" if kept else ""))
        except OSError as exc:
            logger.warning("Compaction of %s skipped: %s", self.path, exc)
            return

        dropped = len(lines) - len(kept)
        if dropped:
            logger.warning("Compaction dropped %d line(s) from %s", dropped, self.path)

    def load(self) -> None:
        """
        Rebuild the in-memory index from the file.

        Every keyed record is indexed, so uniqueness checks see all of them.
        Lines that are not valid UTF-8 are skipped, the same as in compact().
        """
        self._users = []
        if not os.path.isfile(self.path):
            logger.info("No users file at %s, starting empty", self.path)
            return

        try:
            lines = _read_lines(self.path)
        except OSError as exc:
            logger.warning("Could not read users file %s, starting empty: %s", self.path, exc)
            return

        for lineno, line in enumerate(lines, start=1):
            if line is not None and not line.strip():
                continue
            record = _parse_record(line)
            if record is None:
                logger.warning("Skipping malformed line %d in %s", lineno, self.path)
                continue
            try:
                self._users.append(User.model_validate(record))
            except ValidationError as exc:
                logger.warning(
                    "User record on line %d in %s is invalid (%s); indexing its username and email only",
                    lineno, self.path, exc.errors()[0]["msg"],
                )
                self._users.append(_fallback_user(record))

        logger.info("Loaded %d user(s) from %s", len(self._users), self.path)
