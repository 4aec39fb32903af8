"""Default settings for project ingestion."""

from dataclasses import dataclass
from typing import Tuple

# Exclusions applied to a newly opened folder until the user edits them
DEFAULT_EXCLUDE_PATTERNS: Tuple[str, ...] = (
    ".git/",
    "*.pyc",
    "__pycache__/",
    "*.entitlements",
    "Resources/",
    "*.xcodeproj/",
    "*.scn",
    "*.dae",
    "*.scnassets/",
    "*.xcassets/",
    "*.lproj/",
    ".DS_Store",
)

DEFAULT_EXCLUDE_BLOCK = "# Exclude files/folders\n" + "\n".join(DEFAULT_EXCLUDE_PATTERNS)

AVAILABLE_MODELS: Tuple[str, ...] = ("gpt-4o", "gpt-4o-mini", "gpt-4", "gpt-3.5-turbo")

DEFAULT_MODEL = "gpt-4o"

DEFAULT_RECENTS_LIMIT = 10


@dataclass
class IngestOptions:
    """Options controlling cost computation and document assembly.

    Attributes:
        include_structure: Whether the document starts with an outline of the visible tree.
        model: Model whose tokenizer is used as the cost function.
        count_tokens: Whether costs and the document token count are computed at all.
    """

    include_structure: bool = False
    model: str = DEFAULT_MODEL
    count_tokens: bool = True
