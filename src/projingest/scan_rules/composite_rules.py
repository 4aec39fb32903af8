"""Composite scan rules for combining multiple rule types."""

from typing import List, Sequence

from .base_rules import BaseScanRules


class CompositeScanRules(BaseScanRules):
    """Combine several scan rules; an entry is skipped if ANY rule skips it.

    An empty composite skips nothing, which is what a scan with hidden entries
    shown and no .gitignore support needs.

    Attributes:
        rules (List[BaseScanRules]): Constituent rules, evaluated in order.

    Example:
        >>> from projingest.scan_rules.hidden_rules import HiddenEntryRules
        >>> from projingest.scan_rules.git_rules import GitIgnoreScanRules
        >>> git_rules = GitIgnoreScanRules()
        >>> git_rules.add_rule("dist/")
        >>> composite = CompositeScanRules([HiddenEntryRules(), git_rules])
        >>> composite.exclude(".env")
        True
        >>> composite.exclude("dist/")
        True
        >>> composite.exclude("src/")
        False
    """

    def __init__(self, rules: Sequence[BaseScanRules] = ()):
        """Initialize composite scan rules.

        Raises:
            TypeError: If any rule doesn't implement BaseScanRules.
        """
        for i, rule in enumerate(rules):
            if not isinstance(rule, BaseScanRules):
                raise TypeError(f"Rule at index {i} must implement BaseScanRules, " f"got {type(rule)}")

        self.rules: List[BaseScanRules] = list(rules)

    def exclude(self, path: str) -> bool:
        return any(rule.exclude(path) for rule in self.rules)

    def add_rule_object(self, rule: BaseScanRules) -> None:
        """Append another rule object.

        Raises:
            TypeError: If rule doesn't implement BaseScanRules.
        """
        if not isinstance(rule, BaseScanRules):
            raise TypeError(f"Rule must implement BaseScanRules, got {type(rule)}")
        self.rules.append(rule)

    def get_rules(self) -> List[BaseScanRules]:
        """Get a copy of the constituent rules list."""
        return list(self.rules)
