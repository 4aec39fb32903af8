"""Binary content detection."""

NULL_BYTE = b"\0"


def is_binary_content(data: bytes) -> bool:
    """Tell whether raw file content is binary.

    Content is binary when it contains at least one null byte. Text in the
    encodings projingest reads (UTF-8 and its ASCII subset) never does.

    Args:
        data: Raw file content.

    Returns:
        True if the content is binary.

    Example:
        >>> is_binary_content(b"print('hi')\\n")
        False
        >>> is_binary_content(b"\\x89PNG\\r\\n\\x1a\\n\\x00\\x00")
        True
    """
    return NULL_BYTE in data
