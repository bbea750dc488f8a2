"""Sequential batch identification of a directory of card photographs."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .client import CardIdentifier
from .files import IMAGE_EXTENSIONS, list_image_files
from .models import DirectoryScan, IdentificationResult

LOGGER = logging.getLogger(__name__)

StatusCallback = Callable[[int, str, str], None]

STATUS_PROCESSING = "Processing..."
STATUS_SUCCESS = "Success"
STATUS_FAILED = "Failed"
STATUS_ERROR = "Error"


class BatchIdentifier:
    """Coordinates discovery, pacing and per-image identification."""

    def __init__(
        self,
        identifier: CardIdentifier,
        *,
        max_retries: int = 3,
        request_delay: float = 1.0,
        extensions: Iterable[str] = IMAGE_EXTENSIONS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._identifier = identifier
        self._max_retries = max_retries
        self._request_delay = request_delay
        self._extensions = tuple(extensions)
        self._sleep = sleep

    def discover(self, directory: Path) -> DirectoryScan:
        return list_image_files(directory, self._extensions)

    def run(
        self,
        files: Sequence[Path],
        on_status: Optional[StatusCallback] = None,
    ) -> List[IdentificationResult]:
        """Identify every file in order; one failing image never stops the batch."""

        results: List[IdentificationResult] = []
        for index, path in enumerate(files):
            file_name = path.name
            _notify(on_status, index, file_name, STATUS_PROCESSING)
            try:
                if index > 0 and self._request_delay > 0:
                    self._sleep(self._request_delay)
                card = self._identifier.identify(
                    path,
                    max_retries=self._max_retries,
                    on_retry=_retry_notifier(on_status, index, file_name),
                )
            except Exception as exc:
                LOGGER.exception("Error processing %s", file_name)
                results.append(IdentificationResult(file_name=file_name, error=str(exc)))
                _notify(on_status, index, file_name, STATUS_ERROR)
                continue
            results.append(IdentificationResult(file_name=file_name, card=card))
            _notify(on_status, index, file_name, STATUS_SUCCESS if card else STATUS_FAILED)
        LOGGER.info(
            "Identified %d of %d images",
            sum(1 for result in results if result.identified),
            len(results),
        )
        return results


def _notify(callback: Optional[StatusCallback], index: int, file_name: str, status: str) -> None:
    if callback is not None:
        callback(index, file_name, status)


def _retry_notifier(callback: Optional[StatusCallback], index: int, file_name: str):
    if callback is None:
        return None

    def on_retry(attempt: int, max_retries: int, delay: int) -> None:
        callback(index, file_name, f"Retrying {attempt}/{max_retries} ({delay}s)...")

    return on_retry
