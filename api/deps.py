from fastapi import Request

from core.completion import CompletionClient
from core.profile import ProfileService
from core.session import SessionRegistry

def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion_client

def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions

def get_profiles(request: Request) -> ProfileService:
    return request.app.state.profiles
