"""Utility functions for notekeeper."""

MAX_FILENAME_LENGTH = 80


def sanitize_for_filename(text: str) -> str:
    """Turn a note title into a file-system friendly file name stem.

    Converts text to a form that:
    - Contains no spaces (uses hyphens between words)
    - Uses only alphanumeric characters, hyphens, and underscores
    - Is at most MAX_FILENAME_LENGTH characters long

    Examples:
        "Groceries: Milk & Eggs" -> "Groceries-Milk-Eggs"
        "   " -> ""

    Args:
        text: The text to sanitize.

    Returns:
        The sanitized stem, possibly empty.
    """
    if not text:
        return ""

    result = (
        text.replace(":", " ").replace(";", " ").replace("/", " ").replace("\\", " ")
    )

    sanitized_words = []
    for word in result.split():
        sanitized_word = "".join(c if c.isalnum() or c in "-_" else "" for c in word)
        if sanitized_word:
            sanitized_words.append(sanitized_word)

    return "-".join(sanitized_words)[:MAX_FILENAME_LENGTH].rstrip("-")
