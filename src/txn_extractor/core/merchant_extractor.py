"""
Merchant/Counterparty Extraction

Best-effort extraction of who was paid (or who paid) from a message.
Body first, then the email subject, then the sender address. No merchant
is a normal outcome.
"""
import re
from email.utils import parseaddr
from typing import Optional

MAX_MERCHANT_LENGTH = 50

# Tried in order against the body; the first valid candidate wins
MERCHANT_PATTERNS = [
    # Mobile money: "Payment received for GHS 123.00 from CHRIS ADJEI DEBRAH"
    r'(?:from|to)\s+([A-Z][A-Z\s]+?)(?:\s+current\s+balance|\s+transaction|\s*\.|$)',
    # "Transfer to JOHN DOE via NRB123456789"
    r'(?:transfer to|payment to)\s+([A-Z][A-Z\s]+?)(?:\s+via|\s+using|\s*\.|$)',
    # Labelled description fields
    r'\bdesc[:\s]+([^\n\r]+?)(?:\s+trans|\s+id|\s*\.\s|$)',
    r'(?:beneficiary|recipient)[:\s]+([A-Z][A-Z0-9\s&.-]+?)(?:\s|$)',
    # POS and ATM: "at SHOPRITE"
    r'(?:\bat|@)\s+([A-Z][A-Z0-9\s&.-]+?)(?:\s+on|\s+dated|\s*\.\s|\s*\.$|$)',
    r'(?:to|from)\s+([A-Z][A-Z0-9\s&.-]+?)(?:\s+on|\s+dated|\s*\.\s|\s*\.$|$)',
    r'(?:merchant|vendor|payee)[:\s]*([A-Z][A-Z0-9\s&.-]+?)(?:\s|$)',
    r'(?:sent to|received from)\s+([A-Z][A-Z\s]+?)(?:\s+\d{10}|\s*\.|$)',
    r'(?:payment from|transfer from)\s+([A-Z][A-Z\s]+?)(?:\s+ref|\s*\.|$)',
    # Email receipts
    r'(?:paid\s+to|sent\s+to)\s+([A-Z][A-Za-z0-9\s&.-]+?)(?:\s|$|\.)',
    r'(?:purchase\s+from|bought\s+from|order\s+from)\s+([A-Z][A-Za-z0-9\s&.-]+?)(?:\s|$|\.)',
    r'(?:transaction\s+at|purchase\s+at|payment\s+at)\s+([A-Z][A-Za-z0-9\s&.-]+?)(?:\s|$|\.)',
]

# Subject lines like "Jumia receipt" or "Uber payment"
SUBJECT_PATTERNS = MERCHANT_PATTERNS + [
    r'^([A-Z][A-Za-z0-9\s&.-]+?)\s+(?:receipt|invoice|payment|transaction)',
]

COMPILED_BODY = [re.compile(p, re.IGNORECASE) for p in MERCHANT_PATTERNS]
COMPILED_SUBJECT = [re.compile(p, re.IGNORECASE) for p in SUBJECT_PATTERNS]

# Generic banking words that are never a counterparty
INVALID_MERCHANT_WORDS = [
    'current balance', 'available balance', 'transaction', 'trans id',
    'reference number', 'ref no', 'account', 'acct', 'balance',
    'successful', 'failed', 'completed', 'alert', 'notification',
    'bank', 'momo', 'mobile money', 'wallet', 'transfer', 'payment',
    'debit', 'credit', 'deposit', 'withdrawal', 'charge', 'fee',
]

# Company suffixes dropped from the end of a name
COMPANY_SUFFIXES = [' INC', ' LLC', ' LTD', ' CO', ' CORP']


def is_valid_merchant_name(name: str) -> bool:
    """
    Reject obvious false positives

    Args:
        name: Candidate merchant

    Returns:
        True if the candidate looks like a name
    """
    if not name or len(name) < 2:
        return False

    lowered = name.lower()
    if any(word in lowered for word in INVALID_MERCHANT_WORDS):
        return False

    if not re.search(r'[a-zA-Z]', name):
        return False

    return not re.fullmatch(r'\d+', name)


def clean_merchant_name(name: str) -> str:
    """Collapse whitespace, drop store numbers and company suffixes, cap length"""
    text = re.sub(r'\s+', ' ', name).strip(' .,-:')

    # "STORE #123" -> "STORE"
    text = re.sub(r'\s+#\s*\d+$', '', text)

    for suffix in COMPANY_SUFFIXES:
        if text.upper().endswith(suffix):
            text = text[:-len(suffix)].strip()

    return text[:MAX_MERCHANT_LENGTH].strip()


def _search(patterns, text: str) -> Optional[str]:
    for pattern in patterns:
        for match in pattern.finditer(text):
            candidate = clean_merchant_name(match.group(1))
            if is_valid_merchant_name(candidate):
                return candidate
    return None


def merchant_from_sender(sender: str) -> Optional[str]:
    """
    Fall back to the sender: display name, else the part before '@'
    or before any trailing metadata

    "Jumia <noreply@jumia.com.gh>" -> "Jumia", "uber.receipts@uber.com" -> "uber.receipts"
    """
    if not sender:
        return None

    display_name, address = parseaddr(sender)
    candidate = display_name.strip() if display_name.strip() else None

    if not candidate:
        source = address or sender
        match = re.match(r'^([^@<\s]+)', source.strip())
        candidate = match.group(1) if match else None

    if not candidate:
        return None

    candidate = clean_merchant_name(candidate)
    return candidate if is_valid_merchant_name(candidate) else None


def extract_merchant(body: str,
                     subject: Optional[str] = None,
                     sender: Optional[str] = None) -> Optional[str]:
    """
    Extract the counterparty of a transaction

    Args:
        body: Message body (original case)
        subject: Email subject, if any
        sender: Sender address, used as last resort

    Returns:
        Merchant name (max 50 chars) or None
    """
    merchant = _search(COMPILED_BODY, body or '')
    if merchant:
        return merchant

    if subject:
        merchant = _search(COMPILED_SUBJECT, subject)
        if merchant:
            return merchant

    return merchant_from_sender(sender)
