"""Shared builders for the test suite."""

import json
from pathlib import Path
from types import SimpleNamespace

import httpx
from openai import APIStatusError, RateLimitError
from PIL import Image

VALID_CARD = {
    "cardName": "Serra Angel",
    "setCode": "4ED",
    "borderColor": "White",
    "artist": "Douglas Shuler",
    "rarity": "Uncommon",
    "type": "Creature — Angel",
    "manaCost": "{3}{W}{W}",
    "powerToughness": "4/4",
}

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/responses")


def make_image(path: Path, size=(32, 32), exif=None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color="white")
    if exif is not None:
        img.save(path, exif=exif)
    else:
        img.save(path)
    return path


def rate_limit_error() -> RateLimitError:
    response = httpx.Response(429, request=_REQUEST)
    return RateLimitError("429 Too Many Requests", response=response, body=None)


def status_error(status_code: int) -> APIStatusError:
    response = httpx.Response(status_code, request=_REQUEST)
    return APIStatusError(f"HTTP {status_code}", response=response, body=None)


class FakeResponses:
    """Stands in for ``OpenAI().responses``; replays a scripted list of outcomes."""

    def __init__(self, outcomes):
        self._outcomes = list(outcomes)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if not isinstance(outcome, str):
            outcome = json.dumps(outcome)
        return SimpleNamespace(output_text=outcome)


class FakeOpenAI:
    def __init__(self, outcomes):
        self.responses = FakeResponses(outcomes)
