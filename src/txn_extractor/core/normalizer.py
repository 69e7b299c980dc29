"""
Message Normalizer

Turns an SMS (body) or an email (subject + body) into one lower-cased
searchable text surface.
"""
import re
from typing import Optional

from ..models import Message

HTML_TAG = re.compile(r'<[^>]*>')


def searchable_text(body: str, subject: Optional[str] = None) -> str:
    """
    Build the lower-cased text the filters and classifiers search

    Args:
        body: Message body
        subject: Email subject (None for SMS)

    Returns:
        Lower-cased text, subject first when present
    """
    text = body or ''
    if subject:
        text = f"{subject} {text}"
    return text.lower()


def normalize_message(message: Message) -> str:
    return searchable_text(message.body, message.subject)


def original_text(message: Message) -> str:
    """Case-preserving counterpart of normalize_message (used by the extractors)"""
    if message.subject:
        return f"{message.subject}\n\n{message.body}"
    return message.body or ''


def strip_html(text: str) -> str:
    return HTML_TAG.sub('', text or '')
