"""
Financial-Message Filter

Binary screen: is this message a financial notification at all?
False positives are fine here, the amount extractor rejects messages
without a usable number.
"""
import re

# Words, phrases and currency markers that suggest money moved
FINANCIAL_KEYWORDS = [
    # Transaction verbs
    'debit', 'credit', 'payment', 'paid', 'received', 'transfer', 'deposit',
    'withdraw', 'purchase', 'refund', 'charge', 'spent', 'cashout', 'cash out',
    # Account activity
    'balance', 'bal:', 'avail.bal', 'transaction', 'trans id', 'acct', 'a/c',
    'account', 'amt:', 'amount', 'total', 'receipt', 'invoice', 'bill',
    'statement', 'salary', 'payroll', 'fee', 'wallet',
    # Currency codes and names
    'ghs', 'cedis', 'usd', 'eur', 'gbp', 'ngn', 'zar', 'kes', 'cad', 'aud',
    # Currency symbols
    '$', '€', '£', '₵', '₦',
]

# Bank names, mobile-money brands and payment processors
TRUSTED_SENDERS = [
    'gtbank', 'gcb', 'uba', 'absa', 'fidelity', 'cal-bank', 'calbank',
    'ecobank', 'stanbic', 'societe-generale', 'prudential', 'zenith', 'access-bank',
    'momo', 'mobile money', 'mtn', 'vodafone', 'airtel', 'tigo', 'm-pesa', 'mpesa',
    'zprompt', 'hubtel', 'expresspay', 'opay', 'fnb', 'nedbank',
    'bank', 'paypal', 'stripe', 'visa', 'mastercard',
]

# Promotional scoring (only used when screening is enabled)
MARKETING_ACTIONS = ['dial', 'call', 'text', 'visit', 'download', 'click', 'whatsapp']
BUSINESS_PROMO = ['support you', 'help you', 'for your business', 'woman in business']
OFFER_WORDS = ['free', 'bonus', 'enjoy', 'take advantage', 'insurance']

PHONE_NUMBER = re.compile(r'\b0\d{9}\b')
URL = re.compile(r'https?://')
USSD_CODE = re.compile(r'#\d+#')

PROMOTIONAL_CUTOFF = 2.0


def is_financial(text: str, sender: str) -> bool:
    """
    Check whether a message looks like a financial notification

    Args:
        text: Normalized (lower-cased) message text
        sender: Sender address or short code

    Returns:
        True if the text carries a financial keyword or the sender is trusted
    """
    text = (text or '').lower()
    sender = (sender or '').lower()

    if any(keyword in text for keyword in FINANCIAL_KEYWORDS):
        return True

    return any(trusted in sender for trusted in TRUSTED_SENDERS)


def promotional_score(text: str) -> float:
    """
    Score marketing signals in a message

    Calls-to-action weigh 2, business promotion phrases 1.5, offer words 1,
    phone numbers and URLs 1.5, USSD codes and help-desk language 1.
    """
    text = (text or '').lower()
    score = 0.0

    score += sum(2 for action in MARKETING_ACTIONS if action in text)
    score += sum(1.5 for phrase in BUSINESS_PROMO if phrase in text)
    score += sum(1 for word in OFFER_WORDS if word in text)

    if PHONE_NUMBER.search(text):
        score += 1.5
    if URL.search(text):
        score += 1.5
    if USSD_CODE.search(text):
        score += 1

    if 'assistance' in text or 'need help' in text:
        score += 1

    return score


def is_promotional(text: str) -> bool:
    return promotional_score(text) >= PROMOTIONAL_CUTOFF
