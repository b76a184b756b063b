"""Pick a display syntax for a body and canonicalize its text.

Classification is a pure function of (MIME type, text): no I/O, and the
same input always yields the same result. It never raises; a body that
claims to be JSON but does not parse is shown as plain text.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass

from harplay.har.model import Content, PostData

# Checked in order; the first substring found in the MIME type wins.
LANGUAGE_KEYWORDS = ("json", "html", "javascript", "css", "xml")

PLAIN_TEXT = "text"


@dataclass(frozen=True)
class Classification:
    """Display language plus canonical text of a body.

    ``text`` is None only for the NO_CONTENT sentinel.
    """

    language: str
    text: str | None

    @property
    def has_content(self) -> bool:
        return self.text is not None


NO_CONTENT = Classification(language=PLAIN_TEXT, text=None)


def _language_for(mime_type: str) -> str:
    lowered = mime_type.lower()
    for keyword in LANGUAGE_KEYWORDS:
        if keyword in lowered:
            return keyword
    return PLAIN_TEXT


def pretty_json(text: str) -> str | None:
    """Re-serialize JSON text with 2-space indentation, or None if it does not parse."""
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except (ValueError, RecursionError):
        # RecursionError: nesting deeper than the interpreter stack
        return None


def classify(mime_type: str | None, text: str | None) -> Classification:
    """Classify a body by MIME type.

    Args:
        mime_type: Declared MIME type (may include parameters, may be empty).
        text: Body text, or None when the capture has no body.

    Returns:
        Classification with the display language and canonical text.
    """
    if text is None:
        return NO_CONTENT

    language = _language_for(mime_type or "")
    if language == "json":
        formatted = pretty_json(text)
        if formatted is None:
            return Classification(language=PLAIN_TEXT, text=text)
        return Classification(language="json", text=formatted)
    return Classification(language=language, text=text)


def decode_body(content: Content) -> tuple[str | None, bool]:
    """Return the body text of a response, decoding base64 where possible.

    Returns:
        Tuple of (text, decoded). ``decoded`` is False when the body was
        base64 but not valid UTF-8, in which case the encoded text is
        returned untouched.
    """
    if content.text is None or (content.encoding or "").lower() != "base64":
        return content.text, True
    try:
        raw = base64.b64decode(content.text, validate=False)
        return raw.decode("utf-8"), True
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return content.text, False


def classify_content(content: Content) -> Classification:
    """Classify a response body, taking its transfer encoding into account."""
    text, decoded = decode_body(content)
    if not decoded:
        # binary payload: show the encoded form as-is
        return Classification(language=PLAIN_TEXT, text=text)
    return classify(content.mime_type, text)


def classify_post_data(post_data: PostData | None) -> Classification:
    """Classify a request body."""
    if post_data is None:
        return NO_CONTENT
    return classify(post_data.mime_type, post_data.text)
