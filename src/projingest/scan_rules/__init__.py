"""Scan-time rules for hiding entries before the tree is built."""

from .base_rules import BaseScanRules
from .composite_rules import CompositeScanRules
from .git_rules import GitIgnoreScanRules
from .hidden_rules import HiddenEntryRules

__all__ = [
    "BaseScanRules",
    "CompositeScanRules",
    "GitIgnoreScanRules",
    "HiddenEntryRules",
]
