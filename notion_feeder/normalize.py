"""Text normalization helpers for feed titles and bodies."""

from bs4 import BeautifulSoup


def _collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def _strip_markup(text: str, separator: str) -> str:
    soup = BeautifulSoup(text, "html.parser")

    for script in soup(["script", "style"]):
        script.decompose()

    # Brackets the parser keeps as text ("5 > 3", "<3") are content
    return soup.get_text(separator=separator)


def normalize_title(title: str | None) -> str:
    """Turn a raw feed title into its canonical comparison string.

    Markup is removed, whitespace runs are collapsed to one space and the
    result is trimmed. Literal angle brackets that are not markup are kept.
    Stripping repeats until the text stops changing, so escaped markup such
    as ``&lt;b&gt;`` is removed too and normalizing twice is a no-op.

    Args:
        title: Raw title that may contain HTML

    Returns:
        Plain text title, or an empty string for empty input
    """
    if not title:
        return ""

    text = _collapse_whitespace(title)
    while "<" in text or ">" in text:
        stripped = _collapse_whitespace(_strip_markup(text, separator=""))
        # every change drops a tag or shortens an entity
        if len(stripped) >= len(text):
            break
        text = stripped
    return text


def clean_html(content: str | None) -> str:
    """Remove HTML tags from content and normalize whitespace.

    Unlike titles, block elements are separated by a space so that
    paragraphs do not run together.
    """
    if not content:
        return ""

    if "<" not in content and ">" not in content:
        return _collapse_whitespace(content)

    return _collapse_whitespace(_strip_markup(content, separator=" "))
