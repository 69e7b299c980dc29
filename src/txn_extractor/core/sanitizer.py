"""
Description Sanitizer

Strips account identifiers and balances out of free-text descriptions.
Replacements run in a fixed order.
"""
import re
from typing import Optional

from .normalizer import strip_html

MAX_DESCRIPTION_LENGTH = 200

CARD_NUMBER = re.compile(r'\b\d{4}[\s*-]+\d{4}\b')
LONG_NUMBER = re.compile(r'\b\d{10,}\b')
REFERENCE = re.compile(r'ref\s*no[:\s]+\w+', re.IGNORECASE)
AVAILABLE_BALANCE = re.compile(r'available\s+balance[:\s]+[\d,.]+', re.IGNORECASE)
WHITESPACE = re.compile(r'\s+')

# Subjects too vague to describe a transaction on their own
GENERIC_SUBJECTS = [
    'transaction alert', 'payment confirmation', 'receipt',
    'notification', 'alert', 'account update',
]
MIN_SUBJECT_LENGTH = 10
MIN_LINE_LENGTH = 10
MAX_LINE_LENGTH = 100


def sanitize(text: str) -> str:
    """
    Mask card and account numbers, drop reference numbers and balances

    Args:
        text: Raw description text

    Returns:
        Cleaned description, at most 200 characters
    """
    if not text:
        return ''

    text = CARD_NUMBER.sub('**** ****', text)
    text = LONG_NUMBER.sub('**********', text)
    text = REFERENCE.sub('', text)
    text = AVAILABLE_BALANCE.sub('', text)
    text = WHITESPACE.sub(' ', text).strip()
    return text[:MAX_DESCRIPTION_LENGTH]


def _is_generic(subject: str) -> bool:
    lowered = subject.lower().strip()
    return len(lowered) < MIN_SUBJECT_LENGTH or lowered in GENERIC_SUBJECTS


def first_meaningful_line(body: str) -> Optional[str]:
    for line in body.splitlines():
        line = line.strip()
        if MIN_LINE_LENGTH <= len(line) <= MAX_LINE_LENGTH and '@' not in line:
            return line
    return None


def describe_email(subject: Optional[str], body: str) -> str:
    """
    Description for an email receipt

    The subject, unless it is generic, in which case the first meaningful
    body line. HTML is removed before sanitizing.
    """
    subject = strip_html(subject or '').strip()
    body = strip_html(body or '')

    description = subject
    if not subject or _is_generic(subject):
        description = first_meaningful_line(body) or subject or body

    return sanitize(description)
