"""OpenAI vision client that identifies a card and validates the answer."""

from __future__ import annotations

import json
import logging
import time
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from openai import APIStatusError, OpenAI, RateLimitError
from pydantic import ValidationError

from .examples import load_examples
from .files import image_segment
from .models import ExamplePair, MTGCard
from .prompt import SCHEMA_NAME, build_example_segments, build_request_content, response_schema

LOGGER = logging.getLogger(__name__)

RetryCallback = Callable[[int, int, int], None]

DEFAULT_MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 1


def backoff_delay(attempt: int) -> int:
    """Seconds to wait after the 0-based ``attempt`` failed: 1, 2, 4, ..."""

    return INITIAL_BACKOFF_SECONDS * 2 ** attempt


def is_rate_limited(exc: BaseException) -> bool:
    if isinstance(exc, RateLimitError):
        return True
    return isinstance(exc, APIStatusError) and exc.status_code == 429


class CardIdentifier:
    """Wrapper around the OpenAI Responses API for card identification.

    Example pairs are loaded once, on first use, from ``examples_dir`` unless
    they are passed in directly. The encoded example segments are reused for
    every request.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: Optional[str] = None,
        organization: Optional[str] = None,
        examples: Optional[Sequence[ExamplePair]] = None,
        examples_dir: Optional[Path] = None,
        temperature: float = 1.0,
        max_output_tokens: int = 8192,
        image_max_edge: Optional[int] = None,
        timeout: Optional[float] = None,
        dry_run: bool = False,
        client: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._model = model
        self._dry_run = dry_run
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._encode = partial(image_segment, max_edge=image_max_edge)
        self._sleep = sleep
        self._examples = examples
        self._examples_dir = examples_dir
        self._example_segments: Optional[List[Dict[str, str]]] = None
        if dry_run:
            self._client = None
        elif client is not None:
            self._client = client
        else:
            # Retries are handled by identify(); the SDK must not add its own.
            kwargs: Dict[str, Any] = {"max_retries": 0}
            if api_key:
                kwargs["api_key"] = api_key
            if organization:
                kwargs["organization"] = organization
            if timeout:
                kwargs["timeout"] = timeout
            self._client = OpenAI(**kwargs)

    @property
    def examples(self) -> Sequence[ExamplePair]:
        if self._examples is None:
            if self._examples_dir is None:
                self._examples = ()
            else:
                self._examples = load_examples(self._examples_dir)
        return self._examples

    def identify(
        self,
        image_path: Path,
        max_retries: int = DEFAULT_MAX_RETRIES,
        on_retry: Optional[RetryCallback] = None,
    ) -> Optional[MTGCard]:
        """Identify the card in ``image_path``.

        Schema validation failures and rate limiting are retried with
        exponential backoff, at most ``max_retries`` times after the first
        attempt. Any other error ends the attempt immediately. Returns None
        when no valid record could be obtained.
        """

        image_path = Path(image_path)
        if self._dry_run:
            LOGGER.info("Dry-run enabled; returning synthetic record for %s", image_path.name)
            return self._mock_response(image_path)

        attempt = 0
        while True:
            try:
                return self._request(image_path)
            except ValidationError as exc:
                LOGGER.warning("Invalid card data for %s: %s", image_path.name, exc)
                reason = "Schema validation failed"
            except Exception as exc:
                if not is_rate_limited(exc):
                    LOGGER.error("Error identifying card %s: %s", image_path.name, exc)
                    return None
                LOGGER.warning("Rate limited while identifying %s", image_path.name)
                reason = "Rate limit hit"

            if attempt >= max_retries:
                LOGGER.error(
                    "Giving up on %s after %d attempt(s): %s",
                    image_path.name,
                    attempt + 1,
                    reason,
                )
                return None
            delay = backoff_delay(attempt)
            attempt += 1
            if on_retry is not None:
                on_retry(attempt, max_retries, delay)
            else:
                LOGGER.info(
                    "%s. Retrying in %d seconds... (Attempt %d/%d)",
                    reason,
                    delay,
                    attempt,
                    max_retries,
                )
            self._sleep(delay)

    def _request(self, image_path: Path) -> MTGCard:
        assert self._client is not None, "Client should be initialized when dry_run is False"
        content = build_request_content(self._prompt_segments(), self._encode(image_path))
        LOGGER.debug("Sending %d content segments for %s", len(content), image_path.name)
        response = self._client.responses.create(
            model=self._model,
            input=[{"role": "user", "content": content}],
            temperature=self._temperature,
            max_output_tokens=self._max_output_tokens,
            text={
                "format": {
                    "type": "json_schema",
                    "name": SCHEMA_NAME,
                    "schema": response_schema(),
                    "strict": False,
                }
            },
        )
        raw = response.output_text
        LOGGER.debug("Received response for %s: %s", image_path.name, raw)
        return MTGCard.model_validate(json.loads(raw))

    def _prompt_segments(self) -> List[Dict[str, str]]:
        if self._example_segments is None:
            self._example_segments = build_example_segments(self.examples, self._encode)
        return self._example_segments

    @staticmethod
    def _mock_response(image_path: Path) -> MTGCard:
        return MTGCard(
            cardName=f"Demo Card ({image_path.stem})",
            setCode="DMO",
            borderColor="Black",
            artist="Unknown Artist",
            rarity="Common",
            type="Artifact",
        )
