import asyncio
import os
from datetime import date

# Keep tests off the network: no Groq key, no Redis
os.environ["GROQ_API_KEY"] = ""
os.environ["REDIS_URL"] = ""

import pytest

from core.errors import ParseError
from core.seasons import get_current_season_info


class FakeCompletionClient:
    """Stands in for CompletionClient; records every call."""

    configured = True

    def __init__(self, reply="", error=None, json_reply=None, delays=None, json_error=None):
        self.reply = reply
        self.error = error
        self.json_error = json_error
        self.json_reply = json_reply
        self.delays = delays or {}
        self.calls = []

    async def complete(self, user_message, context, season=None):
        self.calls.append({"message": user_message, "context": context, "season": season})
        await asyncio.sleep(self.delays.get(user_message, 0))
        if self.error:
            raise self.error
        if callable(self.reply):
            return self.reply(user_message)
        return self.reply

    async def complete_json(self, user_message, context, season=None):
        self.calls.append({"message": user_message, "context": context, "season": season, "json": True})
        if self.error:
            raise self.error
        if self.json_error:
            raise self.json_error
        if self.json_reply is None:
            raise ParseError("JSON mode unavailable")
        return self.json_reply


@pytest.fixture
def november():
    return get_current_season_info(date(2024, 11, 15))


@pytest.fixture
def fake_client():
    return FakeCompletionClient(reply="Maize grows well in Zimbabwe.")


@pytest.fixture
def make_fake_client():
    return FakeCompletionClient
