"""Document formatting strategies."""

from .base_strategy import OutputStrategy
from .markdown_strategy import MarkdownOutputStrategy

__all__ = ["MarkdownOutputStrategy", "OutputStrategy"]
