"""
Test-wide fixtures: a scripted stand-in for the Ollama service and fast retry settings
so nothing in the suite talks to a real model or sleeps for seconds.
"""
from typing import Any, Callable, Dict, List, Optional

import pytest

from src.haunted import config
from src.haunted.haunting_service import FORMAT_INSTRUCTIONS
from src.haunted.models import RetryOptions

PART_NOTE_END = "unless the part has one."


class FakeLLMService:
    """Records prompts and answers with a configurable callable"""

    def __init__(self, respond: Optional[Callable[[str], str]] = None,
                 json_result: Any = None, errors: Optional[List[Exception]] = None):
        self.respond = respond or echo_chunk
        self.json_result = json_result if json_result is not None else {"units": []}
        self.errors = list(errors or [])
        self.prompts: List[str] = []
        self.json_calls: List[Dict[str, Any]] = []

    def _maybe_fail(self):
        if self.errors:
            raise self.errors.pop(0)

    def generate_text(self, prompt: str, max_tokens: int = 8000, temperature: float = 0.7) -> str:
        self.prompts.append(prompt)
        self._maybe_fail()
        return self.respond(prompt)

    def generate_json(self, prompt: str, images=None, temperature: float = 0.1):
        self.json_calls.append({"prompt": prompt, "images": images})
        self._maybe_fail()
        return self.json_result


def echo_chunk(prompt: str) -> str:
    """Return exactly the chunk text that was embedded in the prompt"""
    body = prompt.rsplit("\n\n" + FORMAT_INSTRUCTIONS, 1)[0]
    if PART_NOTE_END in body:
        return body.split(PART_NOTE_END + "\n\n", 1)[1]
    return body.split("\n\n", 1)[1]


@pytest.fixture
def fast_retry() -> RetryOptions:
    return RetryOptions(max_retries=2, base_delay_ms=1, max_delay_ms=5)


@pytest.fixture
def fake_llm() -> FakeLLMService:
    return FakeLLMService()


@pytest.fixture(autouse=True)
def fresh_settings():
    config.reload_settings()
    yield
    config.reload_settings()


@pytest.fixture
def llm_factory():
    """Build a FakeLLMService with custom answers or errors"""
    return FakeLLMService
