"""Markdown -> plain text normalization used for counting and pattern checks"""

import re

_FENCED_CODE = re.compile(r"(```|~~~)[\s\S]*?\1")
_HTML_TAG = re.compile(r"<[^>]+>")
_IMAGE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK = re.compile(r"\[([^\]]+)\]\([^)]*\)")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_HEADING = re.compile(r"^[ \t]{0,3}#{1,6}[ \t]+", re.MULTILINE)
_HORIZONTAL_RULE = re.compile(r"^[ \t]*([-*_])(?:[ \t]*\1){2,}[ \t]*$", re.MULTILINE)
_BULLET = re.compile(r"^[ \t]*[-*+][ \t]+(?:\[[ xX]\][ \t]+)?", re.MULTILINE)
_NUMBERED = re.compile(r"^[ \t]*\d+\.[ \t]+", re.MULTILINE)
_QUOTE = re.compile(r"^[ \t]*>[ \t]?", re.MULTILINE)
_EMPHASIS = re.compile(r"(\*{1,2}|_{1,2}|~~)([^*_~\n]+)\1")
_WHITESPACE = re.compile(r"\s+")

_HAN = re.compile(r"[\u4e00-\u9fff]")
_COUNTED = re.compile(r"[^A-Za-z0-9\s]")


def strip_markdown(content: str) -> str:
    """Remove Markdown syntax and collapse whitespace.

    Link text is kept, images are dropped entirely.
    """
    if not content:
        return ""

    text = _FENCED_CODE.sub("", content)
    text = _HTML_TAG.sub("", text)
    text = _IMAGE.sub("", text)
    text = _LINK.sub(r"\1", text)
    text = _INLINE_CODE.sub(r"\1", text)
    text = _HEADING.sub("", text)
    text = _HORIZONTAL_RULE.sub("", text)
    text = _BULLET.sub("", text)
    text = _NUMBERED.sub("", text)
    text = _QUOTE.sub("", text)
    text = _EMPHASIS.sub(r"\2", text)

    return _WHITESPACE.sub(" ", text).strip()


def count_characters(text: str) -> int:
    # Word count for Chinese prose: every code point that is not an ASCII
    # letter, a digit or whitespace.
    return len(_COUNTED.findall(text))


def count_han(text: str) -> int:
    return len(_HAN.findall(text))
