"""
FastAPI dependencies for the objects owned by the app lifespan.
"""

from fastapi import Request

from config import Settings
from sessions import SessionRegistry
from store import CredentialStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> CredentialStore:
    return request.app.state.store


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions
