"""
Amount Extractor

Locale-aware amount extraction. Patterns are tried in a fixed order, most
specific (currency-labelled) first, a bare NNN.NN last. The first pattern
with a valid match wins even if a later pattern would also match.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Pattern, Tuple

CURRENCY_CODES = ['usd', 'ghs', 'eur', 'gbp', 'cad', 'aud', 'ngn', 'zar', 'kes']

CURRENCY_SYMBOLS = {
    '$': 'USD',
    '€': 'EUR',
    '£': 'GBP',
    '₵': 'GHS',
    '₦': 'NGN',
}

# Upper bound per currency; anything larger is an account or phone number
CURRENCY_LIMITS = {
    'USD': Decimal('500000'),
    'EUR': Decimal('450000'),
    'GBP': Decimal('400000'),
    'GHS': Decimal('2000000'),
    'NGN': Decimal('100000000'),
    'ZAR': Decimal('5000000'),
    'KES': Decimal('10000000'),
    'CAD': Decimal('700000'),
    'AUD': Decimal('750000'),
}
DEFAULT_LIMIT = Decimal('1000000')

NUMBER = re.compile(r'-?\d+(?:\.\d+)?')

_AMOUNT = r'(?P<amount>\d[\d,]*(?:\.\d{1,2})?)'
_BARE_AMOUNT = r'(?<![\d.,])(?P<amount>\d[\d,]*\.\d{2})(?!\d)'
_CODES = '|'.join(CURRENCY_CODES)


def _p(regex: str, flags=re.IGNORECASE) -> Pattern:
    return re.compile(regex, flags)


# (pattern, fixed currency). When the currency is None it comes from the
# pattern's `code` group, or from the rest of the text.
AMOUNT_PATTERNS: List[Tuple[Pattern, Optional[str]]] = [
    # "Payment received for GHS 123.00"
    (_p(rf'(?:payment\s+(?:received|sent)\s+for\s+|received\s+for\s+)(?P<code>{_CODES})\.?\s*{_AMOUNT}'), None),
    # "Amt: GHS150.00"
    (_p(rf'amt[:\s]*(?P<code>{_CODES})\.?\s*{_AMOUNT}'), None),
    # Currency symbols
    (_p(rf'\$\s*{_AMOUNT}'), 'USD'),
    (_p(rf'€\s*{_AMOUNT}'), 'EUR'),
    (_p(rf'£\s*{_AMOUNT}'), 'GBP'),
    (_p(rf'₵\s*{_AMOUNT}'), 'GHS'),
    (_p(rf'₦\s*{_AMOUNT}'), 'NGN'),
    (_p(rf'(?<![A-Za-z])R\s?{_AMOUNT}', 0), 'ZAR'),
    # Code before amount: "GHS 500.00", "NGN12,500"
    (_p(rf'\b(?P<code>{_CODES})\.?\s*{_AMOUNT}'), None),
    # Code after amount: "500.00 GHS"
    (_p(rf'{_AMOUNT}\s*(?P<code>{_CODES})\b'), None),
    (_p(rf'cedis\s*[:\s]*₵?\s*{_AMOUNT}'), 'GHS'),
    # Labelled amounts with no currency
    (_p(rf'amount[:\s]+(?:[\$€£₵₦]\s*)?{_AMOUNT}'), None),
    (_p(rf'total[:\s]+(?:[\$€£₵₦]\s*)?{_AMOUNT}'), None),
    (_p(rf'(?:debit|credit|paid|spent|charged)[^0-9]*{_AMOUNT}'), None),
    (_p(rf'amt[:\s]*{_AMOUNT}'), None),
    # Last resort: bare NNN.NN
    (_p(_BARE_AMOUNT), None),
]


def parse_amount(raw: str) -> Optional[Decimal]:
    """
    Normalize an amount string to Decimal

    Thousands separators are stripped and surrounding currency labels
    ("GHS", "$") ignored. Returns None if there is no number.
    """
    if raw is None:
        return None
    cleaned = str(raw).replace(',', '')
    match = NUMBER.search(cleaned)
    if not match:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def is_valid_amount(amount: Optional[Decimal], currency: Optional[str] = None) -> bool:
    """A finite number, strictly positive, within the currency's ceiling"""
    if amount is None or not amount.is_finite():
        return False
    if amount <= 0:
        return False
    limit = CURRENCY_LIMITS.get((currency or '').upper(), DEFAULT_LIMIT)
    return amount <= limit


def detect_currency(text: str, default: str = 'GHS') -> str:
    """
    Find the currency a message is written in

    Only an explicit code or symbol counts; anything else is assumed to be
    in the base currency.
    """
    lowered = (text or '').lower()
    for code in CURRENCY_CODES:
        if re.search(rf'\b{code}\b|\d{code}\b|\b{code}\d', lowered):
            return code.upper()
    for symbol, code in CURRENCY_SYMBOLS.items():
        if symbol in lowered:
            return code
    return default.upper()


def extract_amount_and_currency(text: str, default_currency: str = 'GHS') -> Optional[Tuple[Decimal, str]]:
    """
    Extract the transaction amount and its currency

    Args:
        text: Message text (case does not matter, except for the R symbol)
        default_currency: Base currency for unlabelled amounts

    Returns:
        (amount, currency code) or None if no pattern yields a valid amount
    """
    if not text:
        return None

    for pattern, fixed_currency in AMOUNT_PATTERNS:
        for match in pattern.finditer(text):
            amount = parse_amount(match.group('amount'))

            if fixed_currency:
                currency = fixed_currency
            elif 'code' in pattern.groupindex and match.group('code'):
                currency = match.group('code').upper()
            else:
                currency = detect_currency(text, default_currency)

            if is_valid_amount(amount, currency):
                return amount, currency

    return None


def extract_amount(text: str) -> Optional[Decimal]:
    result = extract_amount_and_currency(text)
    return result[0] if result else None
