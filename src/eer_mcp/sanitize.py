"""Text sanitizers for free-text fields returned by the backend.

Ticket process history and knowledge-base articles come back as HTML, often
with inline base64 images.  These helpers reduce them to plain text so that
summaries stay small.

Two variants exist:

- :func:`sanitize_html` -- the full pipeline, for content that may embed
  media (ticket process history).
- :func:`sanitize_text` -- markup and entity cleanup only (knowledge-base
  article bodies).

The transforms run in a fixed order; reordering them changes the output.
"""

from __future__ import annotations

import re
from typing import Optional

_BASE64_IMAGE_RE = re.compile(r"data:image/[^;]+;base64,[A-Za-z0-9+/=]+")
_IMG_TAG_RE = re.compile(r"<img[^>]+src=\"([^\"]+)\"[^>]*>", re.IGNORECASE)
_FILE_INFO_RE = re.compile(r"fileInfo=[A-Za-z0-9+/%=]+")
_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*>[\s\S]*?</\1>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")

# Applied in order: "&amp;" is decoded after "&lt;"/"&gt;" so that an encoded
# entity such as "&amp;lt;" becomes the literal text "&lt;".
_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
)

IMAGE_PLACEHOLDER = "[IMAGE: {filename}] "


def sanitize_html(contents: Optional[str]) -> str:
    """Reduce HTML content with embedded media to plain text."""
    if not contents:
        return ""
    text = strip_inline_images(contents)
    text = _IMG_TAG_RE.sub(_image_placeholder, text)
    text = _FILE_INFO_RE.sub("", text)
    text = _SCRIPT_STYLE_RE.sub("", text)
    return _strip_markup(text)


def sanitize_text(contents: Optional[str]) -> str:
    """Strip tags and entities from HTML that carries no embedded media."""
    if not contents:
        return ""
    return _strip_markup(contents)


def strip_inline_images(contents: str) -> str:
    """Remove base64 ``data:image`` URIs entirely."""
    return _BASE64_IMAGE_RE.sub("", contents)


def image_filename(url: str) -> str:
    """Return the trailing file name of an image URL without its query string.

    >>> image_filename("http://x/y/z.png?v=1")
    'z.png'
    """
    filename = url.split("/")[-1].split("?")[0]
    return filename or "image"


def decode_entities(text: str) -> str:
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    return text


def _image_placeholder(match: re.Match) -> str:
    return IMAGE_PLACEHOLDER.format(filename=image_filename(match.group(1)))


def _strip_markup(text: str) -> str:
    text = _TAG_RE.sub(" ", text)
    text = decode_entities(text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()
