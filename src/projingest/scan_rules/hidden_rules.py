"""Scan rule that skips hidden entries."""

import posixpath

from .base_rules import BaseScanRules


class HiddenEntryRules(BaseScanRules):
    """Skip entries whose name starts with a dot.

    This mirrors how file managers hide dotfiles: ``.git/``, ``.DS_Store`` and
    ``.env`` are never scanned, at any depth.

    Example:
        >>> rules = HiddenEntryRules()
        >>> rules.exclude("config/.env")
        True
        >>> rules.exclude("config/settings.toml")
        False
    """

    def exclude(self, path: str) -> bool:
        name = posixpath.basename(path.rstrip("/"))
        return name.startswith(".")
