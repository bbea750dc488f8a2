"""Magic: The Gathering card identification from photographs."""

from .batch import BatchIdentifier
from .client import CardIdentifier
from .config import IdentifierConfig, MissingAPIKey
from .examples import ExampleSet, load_examples
from .models import BorderColor, DirectoryScan, ExamplePair, IdentificationResult, MTGCard, Rarity

__all__ = [
    "BatchIdentifier",
    "CardIdentifier",
    "IdentifierConfig",
    "MissingAPIKey",
    "ExampleSet",
    "load_examples",
    "BorderColor",
    "DirectoryScan",
    "ExamplePair",
    "IdentificationResult",
    "MTGCard",
    "Rarity",
]
