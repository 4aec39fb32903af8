"""Project ingestion utilities.

This package turns a directory tree into a single Markdown document suitable
for Large Language Models, with gitignore-style include/exclude filtering and
per-file token accounting.
"""

from importlib.metadata import PackageNotFoundError, version

# Expose the version for both programmatic use and CLI
try:
    __version__ = version("projingest")
except PackageNotFoundError:
    __version__ = "unknown"
