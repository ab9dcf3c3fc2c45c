"""
Runtime configuration.

Values come from environment variables (main.py loads backend/.env first).
Settings bundles them for create_app() so tests can override any field:

  PORT=3000
  USERS_FILE=/var/lib/frontdesk/users.txt
  SESSION_TTL_SECONDS=3600
  PROTECTED_PAGES=/mainmenu.html,/sales.html
"""

import os

from pydantic import BaseModel, Field

BACKEND_ROOT = os.path.abspath(os.path.dirname(__file__))

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

PUBLIC_DIR = os.environ.get("PUBLIC_DIR", os.path.join(BACKEND_ROOT, "public"))
USERS_FILE = os.environ.get("USERS_FILE", os.path.join(BACKEND_ROOT, "users.txt"))

SESSION_TTL_SECONDS = float(os.environ.get("SESSION_TTL_SECONDS", str(60 * 60)))  # 1 hour
SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "sid")

LOGIN_PAGE = os.environ.get("LOGIN_PAGE", "/Login.html")
PROTECTED_PAGES = [
    p.strip()
    for p in os.environ.get("PROTECTED_PAGES", "/mainmenu.html").split(",")
    if p.strip()
]

PASSWORD_HASH_ITERATIONS = int(os.environ.get("PASSWORD_HASH_ITERATIONS", "200000"))


class Settings(BaseModel):
    public_dir: str = PUBLIC_DIR
    users_file: str = USERS_FILE
    session_ttl_seconds: float = SESSION_TTL_SECONDS
    session_cookie_name: str = SESSION_COOKIE_NAME
    login_page: str = LOGIN_PAGE
    protected_pages: list[str] = Field(default_factory=lambda: list(PROTECTED_PAGES))
    password_hash_iterations: int = PASSWORD_HASH_ITERATIONS
