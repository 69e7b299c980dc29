"""
Message Parser

Turns one message into a ParsedTransaction:
1. Financial filter (and optional promotional screen)
2. User rules (first structural match wins, heuristics skipped)
3. Generic heuristics: amount, direction, merchant, account, category
4. Description sanitizing and confidence scoring
"""
from typing import Optional, Tuple

from ..models import Message, OutcomeStatus, ParsedTransaction, Source
from .account_matcher import match_account
from .amount_extractor import extract_amount_and_currency
from .category_classifier import classify
from .confidence import score_confidence
from .direction import classify_direction
from .merchant_extractor import extract_merchant
from .message_filter import is_financial, is_promotional
from .normalizer import normalize_message, original_text, strip_html
from .rule_engine import RuleEngine
from .sanitizer import describe_email, sanitize
from .vocabulary import Vocabulary, VocabularyCache

ParseResult = Tuple[OutcomeStatus, Optional[ParsedTransaction]]


class MessageParser:
    """
    Extraction half of the pipeline; never touches the ledger
    """

    def __init__(self,
                 vocabulary: VocabularyCache,
                 base_currency: str = 'GHS',
                 screen_promotions: bool = False):
        """
        Args:
            vocabulary: Cache of categories/accounts/rules
            base_currency: Currency assumed when a message names none
            screen_promotions: Reject marketing messages before extraction
        """
        self.vocabulary = vocabulary
        self.base_currency = base_currency
        self.screen_promotions = screen_promotions

        self.rule_engine = RuleEngine(default_currency=base_currency)
        self._rules_snapshot: Optional[Vocabulary] = None

        self.stats = {
            'total': 0,
            'not_financial': 0,
            'no_amount': 0,
            'rule_match': 0,
            'heuristic': 0,
        }

    def _current_vocabulary(self) -> Vocabulary:
        snapshot = self.vocabulary.snapshot()
        if snapshot is not self._rules_snapshot:
            self.rule_engine.load_rules(snapshot.rules)
            self._rules_snapshot = snapshot
        return snapshot

    def parse(self, message: Message) -> ParseResult:
        """
        Parse a single message

        Args:
            message: Raw SMS or email

        Returns:
            (status, parsed transaction). Status is CREATED when a
            transaction was parsed, NOT_FINANCIAL or NO_AMOUNT otherwise.
        """
        self.stats['total'] += 1
        text = normalize_message(message)

        if not is_financial(text, message.sender):
            self.stats['not_financial'] += 1
            return OutcomeStatus.NOT_FINANCIAL, None

        if self.screen_promotions and is_promotional(text):
            self.stats['not_financial'] += 1
            return OutcomeStatus.NOT_FINANCIAL, None

        vocabulary = self._current_vocabulary()
        raw_text = strip_html(original_text(message))

        # Step 1: Try user rules
        parsed = self.rule_engine.match(
            raw_text,
            vocabulary.categories,
            vocabulary.accounts,
            occurred_at=message.timestamp,
            sender=message.sender,
            subject=message.subject,
        )
        if parsed:
            self.stats['rule_match'] += 1
            return OutcomeStatus.CREATED, parsed

        # Step 2: Generic heuristics
        parsed = self.parse_heuristic(message, text, raw_text, vocabulary)
        if parsed is None:
            self.stats['no_amount'] += 1
            return OutcomeStatus.NO_AMOUNT, None

        self.stats['heuristic'] += 1
        return OutcomeStatus.CREATED, parsed

    def parse_heuristic(self,
                        message: Message,
                        text: str,
                        raw_text: str,
                        vocabulary: Vocabulary) -> Optional[ParsedTransaction]:
        """Keyword/regex extraction; None when no usable amount is found"""
        result = extract_amount_and_currency(raw_text, self.base_currency)
        if result is None:
            return None
        amount, currency = result

        direction = classify_direction(text)
        body = strip_html(message.body)
        merchant = extract_merchant(body, message.subject, message.sender)
        account = match_account(text, message.sender, vocabulary.accounts)
        category = classify(text, merchant, direction, vocabulary.categories, message.sender)

        if message.source == Source.EMAIL:
            description = describe_email(message.subject, message.body)
        else:
            description = sanitize(message.body)

        parsed = ParsedTransaction(
            amount=amount,
            currency=currency,
            description=description,
            direction=direction,
            category=category.name,
            occurred_at=message.timestamp,
            raw_text=raw_text,
            merchant=merchant,
            account=account.name if account else None,
        )
        parsed.confidence = score_confidence(parsed, text, message.sender)
        return parsed
