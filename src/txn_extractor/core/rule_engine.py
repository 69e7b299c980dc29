"""
Rule Engine

User-defined extraction rules, tried before the generic heuristics:
- Active rules only, ordered by priority then rule_id
- Patterns compiled case-insensitively and cached per rule
- A rule matches only if its amount group holds a valid positive number
- Invalid patterns are reported and skipped; other rules still run
"""
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Pattern

from ..errors import RuleCompilationError
from ..models import Account, Category, Direction, ExtractionRule, ParsedTransaction
from .amount_extractor import detect_currency, is_valid_amount, parse_amount
from .merchant_extractor import MAX_MERCHANT_LENGTH, extract_merchant
from .sanitizer import sanitize


def compile_rule(rule: ExtractionRule) -> Pattern:
    """
    Compile a rule's pattern

    Raises:
        RuleCompilationError: if the pattern is not a valid regex
    """
    try:
        return re.compile(rule.pattern, re.IGNORECASE)
    except re.error as e:
        raise RuleCompilationError(rule.rule_id, rule.pattern, str(e))


def resolve_group(match, ref: Optional[str], fallback: Optional[str] = None) -> Optional[str]:
    """
    Value of a capture group referenced by index ("1") or name ("amount")

    Falls back to the named group `fallback` when `ref` does not resolve.
    """
    candidates = []
    if ref is not None and str(ref).strip():
        ref = str(ref).strip()
        candidates.append(int(ref) if ref.isdigit() else ref)
    if fallback:
        candidates.append(fallback)

    for group in candidates:
        try:
            value = match.group(group)
        except IndexError:
            continue
        if value is not None:
            return value
    return None


class RuleEngine:
    """
    Runs extraction rules against message text
    """

    def __init__(self, default_currency: str = 'GHS'):
        self.default_currency = default_currency
        self.rules: List[ExtractionRule] = []
        self._compiled: Dict[str, Optional[Pattern]] = {}
        self.stats = {
            'matches': 0,
            'no_match': 0,
            'invalid_rules': 0,
            'by_rule': {},
        }

    def load_rules(self, rules: Iterable[ExtractionRule]):
        """
        Load rules (from the store or a list)

        Inactive rules are dropped; the rest are sorted by priority
        (lower = tried first), then rule_id.
        """
        self.rules = [r for r in rules if r.is_active]
        self.rules.sort(key=lambda r: (r.priority, r.rule_id))
        self._compiled = {}

        print(f"✅ Loaded {len(self.rules)} active rules")

    def pattern_for(self, rule: ExtractionRule) -> Optional[Pattern]:
        """Compiled pattern, or None if the rule's pattern is invalid"""
        if rule.rule_id in self._compiled:
            return self._compiled[rule.rule_id]

        try:
            pattern = compile_rule(rule)
        except RuleCompilationError as e:
            print(f"⚠️  Skipping rule {rule.rule_id} ({rule.name}): {e}")
            self.stats['invalid_rules'] += 1
            pattern = None

        self._compiled[rule.rule_id] = pattern
        return pattern

    def try_rule(self,
                 text: str,
                 rule: ExtractionRule,
                 categories: Iterable[Category] = (),
                 accounts: Iterable[Account] = (),
                 occurred_at: Optional[datetime] = None,
                 sender: Optional[str] = None,
                 subject: Optional[str] = None) -> Optional[ParsedTransaction]:
        """
        Apply one rule to a message

        Args:
            text: Message text (original case)
            rule: Rule to apply
            categories: Vocabulary used to resolve the rule's category
            accounts: Vocabulary used to resolve the rule's account
            occurred_at: Message timestamp
            sender: Sender, for the merchant fallback
            subject: Email subject, for the merchant fallback

        Returns:
            ParsedTransaction bound to the rule's category/account, or None
        """
        pattern = self.pattern_for(rule)
        if pattern is None or not text:
            return None

        match = pattern.search(text)
        if not match:
            return None

        amount = parse_amount(resolve_group(match, rule.amount_group, fallback='amount'))
        currency = detect_currency(text, self.default_currency)
        if not is_valid_amount(amount, currency):
            return None

        merchant = None
        if rule.merchant_group:
            merchant = resolve_group(match, rule.merchant_group, fallback='merchant')
            merchant = merchant.strip()[:MAX_MERCHANT_LENGTH] if merchant else None
        if not merchant:
            merchant = extract_merchant(text, subject, sender)

        category = next((c for c in categories if c.category_id == rule.category_id), None)
        account = None
        if rule.account_id:
            account = next((a for a in accounts if a.account_id == rule.account_id), None)

        return ParsedTransaction(
            amount=amount,
            currency=currency,
            description=sanitize(text),
            direction=category.direction if category else Direction.EXPENSE,
            category=category.name if category else rule.category_id,
            occurred_at=occurred_at or datetime.now(),
            raw_text=text,
            merchant=merchant,
            account=(account.name if account else rule.account_id),
            matched_rule_id=rule.rule_id,
            confidence=1.0,  # Rules are 100% confident
        )

    def match(self,
              text: str,
              categories: Iterable[Category] = (),
              accounts: Iterable[Account] = (),
              occurred_at: Optional[datetime] = None,
              sender: Optional[str] = None,
              subject: Optional[str] = None) -> Optional[ParsedTransaction]:
        """
        Try loaded rules in order; the first structural match wins

        Returns:
            ParsedTransaction or None when no rule matches
        """
        categories = list(categories)
        accounts = list(accounts)

        for rule in self.rules:
            parsed = self.try_rule(text, rule, categories, accounts, occurred_at, sender, subject)
            if parsed:
                self.stats['matches'] += 1
                self.stats['by_rule'][rule.name] = self.stats['by_rule'].get(rule.name, 0) + 1
                return parsed

        self.stats['no_match'] += 1
        return None

    def print_stats(self):
        """Print matching statistics"""
        total = self.stats['matches'] + self.stats['no_match']
        if total == 0:
            print("No messages processed yet")
            return

        print("\n" + "=" * 80)
        print("📊 RULE ENGINE STATISTICS")
        print("=" * 80)
        print(f"Total messages: {total}")
        print(f"  ✅ Matched: {self.stats['matches']} ({self.stats['matches']/total*100:.1f}%)")
        print(f"  ❌ No match: {self.stats['no_match']} ({self.stats['no_match']/total*100:.1f}%)")
        if self.stats['invalid_rules']:
            print(f"  ⚠️  Invalid rules skipped: {self.stats['invalid_rules']}")

        if self.stats['by_rule']:
            print(f"\nMatches by rule:")
            for name, count in sorted(self.stats['by_rule'].items(),
                                      key=lambda x: x[1], reverse=True):
                print(f"  • {name}: {count}")
        print("=" * 80)
