"""Markdown output strategy for project documents.

Each file is written as a fenced code block tagged with the file's extension,
preceded by a horizontal rule and its path:

    ---

    **File:** `src/app.py`

    ```py
    print("hello")
    ```

File content is written raw, without escaping.
"""

from .base_strategy import OutputStrategy


class MarkdownOutputStrategy(OutputStrategy):
    """Output strategy that formats an ingested project as Markdown.

    Example:
        >>> strategy = MarkdownOutputStrategy()
        >>> print(strategy.format_title("my-app"), end='')
        # Project: my-app
        <BLANKLINE>
        >>> print(strategy.format_start("src/app.py", "py"), end='')
        ---
        <BLANKLINE>
        **File:** `src/app.py`
        <BLANKLINE>
        ```py
        >>> print(strategy.format_content('print("hello")'), end='')
        print("hello")
        >>> print(strategy.format_end(), end='')
        <BLANKLINE>
        ```
        <BLANKLINE>
    """

    FENCE = "```"

    def format_title(self, project_name: str) -> str:
        return f"# Project: {project_name}\n\n"

    def format_structure(self, outline: str) -> str:
        """Wrap the outline in a fenced block under a bold heading.

        Example:
            >>> print(MarkdownOutputStrategy().format_structure("app\\n└── main.py\\n"), end='')
            **Project Structure:**
            <BLANKLINE>
            ```
            app
            └── main.py
            ```
            <BLANKLINE>
        """
        return f"**Project Structure:**\n\n{self.FENCE}\n{outline}{self.FENCE}\n\n"

    def format_start(self, relative_path: str, language: str) -> str:
        return f"---\n\n**File:** `{relative_path}`\n\n{self.FENCE}{language}\n"

    def format_content(self, content: str) -> str:
        return content

    def format_end(self) -> str:
        return f"\n{self.FENCE}\n\n"

    def get_file_extension(self) -> str:
        return ".md"
