"""
Cleanup of raw post/page content before it is used as corpus text
"""
import html
import re

_TAG = re.compile(r"<[^>]+>")
_SHORTCODE = re.compile(r"\[/?[a-zA-Z][^\]]*\]")
_SCRIPT_STYLE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_WHITESPACE = re.compile(r"\s+")


def clean_content(raw: str) -> str:
    """
    Strip HTML (including script/style bodies) and shortcodes, decode entities,
    collapse whitespace.

    Args:
        raw: Post or page content as stored in the content repository

    Returns:
        Plain text on a single line
    """
    if not raw:
        return ""
    text = _SCRIPT_STYLE.sub(" ", raw)
    # Tags become spaces so "<p>One.</p><p>Two.</p>" still splits into two sentences
    text = _TAG.sub(" ", text)
    text = _SHORTCODE.sub(" ", text)
    text = html.unescape(text)
    return _WHITESPACE.sub(" ", text).strip()
