"""
Account Matcher

Best-effort tagging of a message with one of the user's accounts:
1. An account keyword appears in the sender
2. A masked account/card number in the body matches an account keyword,
   or an account keyword appears in the body
3. A known bank or wallet identifier in the sender is shared by an account keyword

Returns None rather than guessing.
"""
import re
from typing import Iterable, List, Optional

from ..models import Account

# Masked account fragments; group 1 is the visible prefix/suffix
ACCOUNT_NUMBER_PATTERNS = [
    re.compile(r'acct[:\s]*(\d{4})\*+\d{2}', re.IGNORECASE),
    re.compile(r'account[:\s]*(\d{4})\*+\d{4}', re.IGNORECASE),
    re.compile(r'a/c[:\s]*(\d{4})\*+\d{2}', re.IGNORECASE),
    re.compile(r'account ending (?:in )?(\d{4})', re.IGNORECASE),
    re.compile(r'card ending (?:in )?(\d{4})', re.IGNORECASE),
]

# Sender identifiers for banks, wallets and payment gateways
BANK_IDENTIFIERS: List[List[str]] = [
    # Ghana banks
    ['gtbank', 'gt bank', 'guaranty trust'],
    ['gcb-bank', 'gcb bank', 'ghana commercial'],
    ['uba-ghana', 'uba ghana', 'united bank'],
    ['absa-bank', 'absa ghana', 'barclays'],
    ['fidelity-bank', 'fidelity ghana'],
    ['cal-bank', 'cal bank'],
    ['ecobank-ghana', 'ecobank'],
    ['stanbic-bank', 'stanbic'],
    ['zenith-bank', 'zenith'],
    ['access-bank', 'access'],
    # Mobile money
    ['mtn-momo', 'mtn momo', 'mtn mobile'],
    ['vodafone-cash', 'voda cash', 'vodafone'],
    ['airtel-money', 'airtel money'],
    ['tigo-cash', 'tigo cash'],
    # Payment processors
    ['zprompt', 'z prompt'],
    ['hubtel', 'hbtl.co'],
    ['expresspay'],
    # Nigeria
    ['gtbank-ng', 'gtb nigeria'],
    ['zenith-ng', 'zenith nigeria'],
    ['uba-nigeria', 'uba ng'],
    # South Africa
    ['fnb', 'first national'],
    ['absa-sa', 'absa south africa'],
    ['standard bank', 'standardbank'],
    ['nedbank'],
]


def _active(accounts: Iterable[Account]) -> List[Account]:
    return [account for account in accounts if account.is_active]


def _keywords(account: Account) -> List[str]:
    return [keyword.lower() for keyword in account.keywords if keyword]


def match_by_sender(sender: str, accounts: Iterable[Account]) -> Optional[Account]:
    for account in accounts:
        if any(keyword in sender for keyword in _keywords(account)):
            return account
    return None


def match_by_body(text: str, accounts: Iterable[Account]) -> Optional[Account]:
    """Masked account numbers first, then plain keyword mentions"""
    accounts = list(accounts)

    for pattern in ACCOUNT_NUMBER_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        suffix = match.group(1)
        for account in accounts:
            if any(suffix in keyword for keyword in _keywords(account)):
                return account

    for account in accounts:
        if any(keyword in text for keyword in _keywords(account)):
            return account
    return None


def match_by_bank_identifier(sender: str, accounts: Iterable[Account]) -> Optional[Account]:
    accounts = list(accounts)
    for identifiers in BANK_IDENTIFIERS:
        if not any(identifier in sender for identifier in identifiers):
            continue
        for account in accounts:
            if any(identifier in keyword
                   for keyword in _keywords(account)
                   for identifier in identifiers):
                return account
    return None


def match_account(text: str, sender: str, accounts: Iterable[Account]) -> Optional[Account]:
    """
    Associate a message with a known account

    Args:
        text: Message text
        sender: Sender address or short code
        accounts: Known accounts (inactive ones are ignored)

    Returns:
        Matching Account or None
    """
    text = (text or '').lower()
    sender = (sender or '').lower()
    candidates = _active(accounts)
    if not candidates:
        return None

    return (match_by_sender(sender, candidates)
            or match_by_body(text, candidates)
            or match_by_bank_identifier(sender, candidates))
