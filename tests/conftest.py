import json
from typing import List, Optional, Union

import pytest
from fastapi.testclient import TestClient

from agrosage.main import app
from agrosage.services.genai_client import MissingAPIKeyError, get_genai_client


class FakeGenAIClient:
    """Stands in for GenAIClient: returns a canned reply and records the prompt parts."""

    model_name = "fake-model"

    def __init__(self, reply: Union[str, dict, None] = None, error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[list] = []

    @property
    def configured(self) -> bool:
        return not isinstance(self.error, MissingAPIKeyError)

    async def generate(self, parts):
        self.calls.append(parts)
        if self.error is not None:
            raise self.error
        if isinstance(self.reply, (dict, list)):
            return json.dumps(self.reply)
        return self.reply or ""


@pytest.fixture
def fake_client():
    fake = FakeGenAIClient()
    app.dependency_overrides[get_genai_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_genai_client, None)


@pytest.fixture
def client(fake_client):
    with TestClient(app) as c:
        yield c
