class IngestError(Exception):
    """Base class for all errors raised by projingest."""

    pass


class AccessDenied(IngestError):
    """
    Exception raised when a path cannot be listed or read.

    The core recovers from this error locally: the affected directory is treated
    as having no children, or the affected file is skipped and zeroed.

    Attributes:
        path (str): The path that could not be accessed.

    Example:
        >>> error = AccessDenied("/srv/project/secret.txt", "Permission denied")
        >>> str(error)
        'Access denied to /srv/project/secret.txt: Permission denied'
    """

    def __init__(self, path: str, reason: str = "") -> None:
        """
        Initialize the exception with the inaccessible path.

        Args:
            path (str): The path that could not be accessed.
            reason (str, optional): Underlying error text. Defaults to "".
        """
        self.path = path
        self.reason = reason
        message = f"Access denied to {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class EncoderUnavailable(IngestError):
    """
    Exception raised when the cost function for a model cannot be acquired.

    This aborts a whole cost pass: partial results computed without a consistent
    cost model would be misleading. When the cause is a missing `tiktoken`
    installation, the message carries installation instructions.

    Attributes:
        model (str): The model whose encoder could not be loaded.

    Example:
        >>> error = EncoderUnavailable("gpt-9")
        >>> str(error)
        "Could not load tokenizer for model 'gpt-9'."
    """

    def __init__(self, model: str, message: str = "") -> None:
        """
        Initialize the exception with the model identifier.

        Args:
            model (str): The model whose encoder could not be loaded.
            message (str, optional): Overrides the default message. Defaults to "".
        """
        self.model = model
        self.message = message or f"Could not load tokenizer for model '{model}'."
        super().__init__(self.message)


class ContentUndecodable(IngestError):
    """
    Exception raised when a file's content is not valid text.

    Attributes:
        path (str): Path to the file that could not be decoded.

    Example:
        >>> error = ContentUndecodable("/srv/project/logo.png")
        >>> str(error)
        'Content is not valid text: /srv/project/logo.png'
    """

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        message = f"Content is not valid text: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class WriteFailed(IngestError):
    """
    Exception raised when the assembled document cannot be persisted.

    Example:
        >>> error = WriteFailed("/read-only/out.md", "Read-only file system")
        >>> str(error)
        'Failed to write /read-only/out.md: Read-only file system'
    """

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        message = f"Failed to write {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
