"""Loading of the reference examples that prime the model."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from pydantic import ValidationError

from .files import IMAGE_EXTENSIONS
from .models import ExamplePair, MTGCard

LOGGER = logging.getLogger(__name__)


class ExampleSet(Sequence[ExamplePair]):
    """Ordered example pairs plus whether the examples directory was readable."""

    def __init__(self, pairs: Sequence[ExamplePair] = (), *, found: bool = True) -> None:
        self._pairs = tuple(pairs)
        self.found = found

    def __getitem__(self, index):  # type: ignore[override]
        return self._pairs[index]

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[ExamplePair]:
        return iter(self._pairs)

    def __repr__(self) -> str:
        return f"ExampleSet({len(self._pairs)} pairs, found={self.found})"


def _match_image(directory: Path, base_name: str, names: set[str]) -> Optional[Path]:
    for ext in IMAGE_EXTENSIONS:
        candidate = f"{base_name}{ext}"
        if candidate in names:
            return directory / candidate
    return None


def _read_label(path: Path) -> Optional[MTGCard]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return MTGCard.model_validate(data)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
        LOGGER.warning("Skipping example label %s: %s", path.name, exc)
        return None


def load_examples(directory: Path) -> ExampleSet:
    """Pair every ``<name>.json`` label in ``directory`` with ``<name>.<image ext>``.

    Labels without a matching image are skipped. A missing or unreadable
    directory yields an empty set with ``found=False``; examples are advisory
    so this never raises.
    """

    try:
        names = {path.name for path in directory.iterdir() if path.is_file()}
    except OSError as exc:
        LOGGER.warning("Cannot read examples directory %s: %s", directory, exc)
        return ExampleSet(found=False)

    pairs: List[ExamplePair] = []
    for label_name in sorted(name for name in names if name.endswith(".json")):
        base_name = label_name[: -len(".json")]
        image_path = _match_image(directory, base_name, names)
        if image_path is None:
            LOGGER.debug("No image found for example label %s; skipping", label_name)
            continue
        card = _read_label(directory / label_name)
        if card is None:
            continue
        pairs.append(ExamplePair(image_path=image_path, card=card))
    LOGGER.info("Loaded %d example pairs from %s", len(pairs), directory)
    return ExampleSet(pairs)
