"""Prompt assembly for card identification requests."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List

from .models import BorderColor, ExamplePair, Rarity

LOGGER = logging.getLogger(__name__)

Segment = Dict[str, str]
ImageEncoder = Callable[[Path], Segment]

CARD_ANATOMY_GUIDE = """
Analyze this Magic: The Gathering card and identify all visible information according to the schema.

MTG CARD ANATOMY GUIDE:

1. CARD NAME: Located at the top center of the card. The primary identifier.

2. SET CODE: The three-letter code representing the expansion set (e.g., 'LEG' for Legends, 'STH' for Stronghold).
   - Look for this at the bottom of the card in small print
   - For older white-bordered cards that are reprints (like Chronicles), identify the original set code
   - For cards with NO EXPANSION SYMBOL that have white borders:
     * Check the copyright date at bottom: "© 1995" = 4ED (Fourth Edition)
     * Check the copyright date at bottom: "© 1997" = 5ED (Fifth Edition)
     * These core sets didn't have expansion symbols but can be identified by copyright year
   - For cards from Arabian Nights (ARN), Antiquities (ATQ), Legends (LEG), The Dark (DRK), and Fallen Empires (FEM) with white borders, these are likely Chronicles (CHR) reprints

3. BORDER COLOR: The color of the frame around the card edge.
   - Black: Original printings, most modern cards
   - White: Reprints (like Chronicles, 4th-9th Edition core sets)
   - Silver: Special cards like Un-sets
   - Gold: Special promos and premium cards
   - Borderless: Art extends to the edge of the card

4. CARD TYPE: The type line in the middle of the card.
   - Older cards (pre-6th Edition) use wordings like "Summon Legend" instead of "Legendary Creature"
   - Very old cards may have types like "Summon Wall" instead of "Creature — Wall"
   - Format examples: "Instant", "Sorcery", "Creature — Human Wizard", "Legendary Creature — Dragon"

5. RARITY: Determined by the color of the expansion symbol (middle-right of the card).
   - Common: Black/white symbol
   - Uncommon: Silver symbol
   - Rare: Gold symbol
   - Mythic Rare: Orange-red symbol
   - Note: Pre-Exodus sets (before 1998) don't have colored symbols - determine rarity from other sources
   - For cards with NO EXPANSION SYMBOL (4ED, 5ED), you cannot determine rarity from the card itself

6. MANA COST: Symbols in the top right corner. Use standard notation:
   - {W} = White, {U} = Blue, {B} = Black, {R} = Red, {G} = Green
   - {1}, {2}, etc. = Generic mana
   - Example: "{2}{W}{U}" means 2 generic, 1 white, 1 blue

7. POWER/TOUGHNESS: For creature cards only, in bottom right corner as "P/T" format (e.g., "2/2").

8. ARTIST: The artist's name at the bottom of the illustration.
"""

CLOSING_INSTRUCTION = (
    "Now analyze the above card following the anatomy guide and examples provided. "
    "Return ONLY the JSON data matching the schema."
)

SCHEMA_NAME = "mtg_card"


def text_segment(text: str) -> Segment:
    return {"type": "input_text", "text": text}


def build_example_segments(examples: Iterable[ExamplePair], encoder: ImageEncoder) -> List[Segment]:
    """Return an image segment followed by its label text for every example.

    Examples whose image cannot be read or decoded are left out.
    """

    segments: List[Segment] = []
    for example in examples:
        try:
            image = encoder(example.image_path)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Skipping example image %s: %s", example.image_path.name, exc)
            continue
        segments.append(image)
        label = json.dumps(example.card.to_label(), indent=2, ensure_ascii=False)
        segments.append(text_segment(f"EXAMPLE CARD: {label}"))
    return segments


def build_request_content(example_segments: Iterable[Segment], target: Segment) -> List[Segment]:
    """Full user content: examples, the anatomy guide, the target image, the closing instruction."""

    content = list(example_segments)
    content.append(text_segment(CARD_ANATOMY_GUIDE))
    content.append(target)
    content.append(text_segment(CLOSING_INSTRUCTION))
    return content


def response_schema() -> Dict[str, object]:
    """JSON Schema the model output must conform to."""

    return {
        "type": "object",
        "properties": {
            "cardName": {
                "type": "string",
                "description": "The name of the card as printed at the top of the card",
            },
            "setCode": {
                "type": "string",
                "description": (
                    "The three-letter code for the set determined by the expansion symbol "
                    "(e.g., 'LEG' for Legends, 'CHR' for Chronicles, 'UMA' for Ultimate Masters, "
                    "'DMU' for Dominaria United)"
                ),
            },
            "borderColor": {
                "type": "string",
                "enum": [color.value for color in BorderColor],
                "description": (
                    "The color of the card's border. White borders often indicate reprints like "
                    "Chronicles, while black borders are typically for original printings."
                ),
            },
            "powerToughness": {
                "type": "string",
                "description": (
                    "The power and toughness of creature cards, shown as numbers in bottom right "
                    "corner (e.g., '3/2')"
                ),
            },
            "artist": {
                "type": "string",
                "description": (
                    "The name of the artist who illustrated the card, printed at the bottom of "
                    "the illustration"
                ),
            },
            "rarity": {
                "type": "string",
                "enum": [rarity.value for rarity in Rarity],
                "description": "The rarity of the card, usually indicated by the color of the set symbol",
            },
            "manaCost": {
                "type": "string",
                "description": (
                    "The mana cost of the card, shown as symbols in the top right corner "
                    "(e.g., '{1}{U}{B}')"
                ),
            },
            "type": {
                "type": "string",
                "description": (
                    "The card type line, which may include types, subtypes, and supertypes "
                    "(e.g., 'Creature — Human Wizard')"
                ),
            },
        },
        "required": ["cardName", "setCode", "borderColor", "artist", "rarity", "type"],
        "additionalProperties": False,
    }
