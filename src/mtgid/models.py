"""Data models used across the identifier."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BorderColor(str, Enum):
    BLACK = "Black"
    WHITE = "White"
    SILVER = "Silver"
    GOLD = "Gold"
    BORDERLESS = "Borderless"


class Rarity(str, Enum):
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    MYTHIC_RARE = "Mythic Rare"


class MTGCard(BaseModel):
    """Validated attributes of one identified Magic: The Gathering card."""

    card_name: str = Field(..., alias="cardName", min_length=1)
    set_code: str = Field(..., alias="setCode")
    border_color: BorderColor = Field(..., alias="borderColor")
    artist: str
    rarity: Rarity
    type: str
    mana_cost: Optional[str] = Field(default=None, alias="manaCost")
    power_toughness: Optional[str] = Field(default=None, alias="powerToughness")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("card_name", mode="before")
    @classmethod
    def trim_name(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("mana_cost", "power_toughness", mode="before")
    @classmethod
    def empty_to_none(cls, value: object) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return str(value)

    def to_label(self) -> Dict[str, str]:
        """Serialise using the camelCase keys of the label files."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True, slots=True)
class ExamplePair:
    """A reference image together with its known-correct card record."""

    image_path: Path
    card: MTGCard

    def as_payload(self) -> Dict[str, object]:
        return {"image": str(self.image_path), "card": self.card.to_label()}


@dataclass(frozen=True, slots=True)
class IdentificationResult:
    """Outcome of processing one source image."""

    file_name: str
    card: Optional[MTGCard] = None
    error: Optional[str] = None

    @property
    def identified(self) -> bool:
        return self.card is not None

    def dict(self) -> Dict[str, object]:
        return {
            "file_name": self.file_name,
            "card": self.card.to_label() if self.card else None,
            "error": self.error,
        }


@dataclass(frozen=True, slots=True)
class DirectoryScan:
    """Files found in a directory, or an explicit record that it was unreadable.

    ``found`` is False when the directory is missing or could not be listed,
    which keeps that case distinct from a directory that exists but is empty.
    """

    directory: Path
    files: Tuple[Path, ...] = ()
    found: bool = True

    def __iter__(self) -> Iterator[Path]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)
