"""Output strategy base class defining the interface for document formatting.

This module provides the abstract base class that defines how an ingested
project is laid out in the final document. The assembler decides what goes in
the document and in which order; a strategy decides what it looks like.
"""

from abc import ABC, abstractmethod


class OutputStrategy(ABC):
    """Abstract base class defining the interface for document formatting strategies.

    The document is produced in three parts:
    1. Title - identifies the project
    2. Structure - an optional outline of the visible tree
    3. Files - for every included file, a start wrapper, the content and an end wrapper

    Example:
        >>> class PlainStrategy(OutputStrategy):
        ...     def format_title(self, project_name: str) -> str:
        ...         return f"{project_name}\\n"
        ...
        ...     def format_structure(self, outline: str) -> str:
        ...         return outline + "\\n"
        ...
        ...     def format_start(self, relative_path: str, language: str) -> str:
        ...         return f"== {relative_path} ==\\n"
        ...
        ...     def format_content(self, content: str) -> str:
        ...         return content
        ...
        ...     def format_end(self) -> str:
        ...         return "\\n"
        ...
        ...     def get_file_extension(self) -> str:
        ...         return ".txt"
        >>> PlainStrategy().format_start("src/app.py", "py")
        '== src/app.py ==\\n'
    """

    @abstractmethod
    def format_title(self, project_name: str) -> str:
        """Format the document title.

        Args:
            project_name: Name of the project root folder.

        Returns:
            The formatted title, including any trailing separation.
        """
        pass

    @abstractmethod
    def format_structure(self, outline: str) -> str:
        """Format the outline of the visible tree.

        Args:
            outline: The rendered outline, one line per node, each ending in a newline.

        Returns:
            The formatted structure section.
        """
        pass

    @abstractmethod
    def format_start(self, relative_path: str, language: str) -> str:
        """Format the opening wrapper for a file's content.

        Args:
            relative_path: Root-relative path of the file.
            language: Language hint, usually the file extension without the dot.
                May be empty.

        Returns:
            The formatted opening wrapper string.
        """
        pass

    @abstractmethod
    def format_content(self, content: str) -> str:
        """Format a file's raw content.

        Args:
            content: The decoded file content.

        Returns:
            The formatted content string.
        """
        pass

    @abstractmethod
    def format_end(self) -> str:
        """Format the closing wrapper for a file's content."""
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get the appropriate file extension for this output format.

        Returns:
            The file extension including the leading dot (e.g., ".md").
        """
        pass
