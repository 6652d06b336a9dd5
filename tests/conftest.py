import json
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

CATEGORIES_YAML = Path(__file__).resolve().parent.parent / "config" / "categories.yaml"


@pytest.fixture
def catalog():
    from pii_protector.catalog.loader import load_catalog

    return load_catalog(CATEGORIES_YAML)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CATEGORIES_PATH", str(CATEGORIES_YAML))
    monkeypatch.setenv("OLLAMA_URL", "http://ollama.test:11434")
    monkeypatch.setenv("OLLAMA_MODEL", "qwen2.5:7b")

    from pii_protector.api.deps import get_catalog
    from pii_protector.core.settings import get_settings

    get_settings.cache_clear()
    get_catalog.cache_clear()
    yield
    get_settings.cache_clear()
    get_catalog.cache_clear()


class FakeOllama:
    """httpx handler standing in for an Ollama server.

    ``GET /api/tags`` always answers 200.  ``POST /api/generate`` routes on
    prompt wording: detection, schema inference, explanation.  ``calls``
    records every generate payload.
    """

    def __init__(
        self,
        detection: object = None,
        schema: str = "[]",
        explanation: str = '{"explanation": "It identifies a person."}',
    ) -> None:
        if detection is None:
            detection = {"entities": []}
        self.detection = detection if isinstance(detection, str) else json.dumps(detection)
        self.schema = schema
        self.explanation = explanation
        self.calls: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": "qwen2.5:7b"}]})
        payload = json.loads(request.content)
        self.calls.append(payload)
        prompt = payload["prompt"]
        if "Scan ONLY for these categories" in prompt:
            body = self.detection
        elif "generate a JSON schema" in prompt:
            body = self.schema
        else:
            body = self.explanation
        return httpx.Response(200, json={"response": body, "eval_count": 7})

    def prompts(self, marker: str) -> list[str]:
        return [c["prompt"] for c in self.calls if marker in c["prompt"]]


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def oracle_client(fake_ollama: FakeOllama):
    from pii_protector.llm.client import OllamaClient

    return OllamaClient(transport=httpx.MockTransport(fake_ollama))


@pytest.fixture
def client(oracle_client) -> TestClient:
    from pii_protector.api.deps import get_oracle_client
    from pii_protector.main import app

    app.dependency_overrides[get_oracle_client] = lambda: oracle_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
