"""
Data Model

Typed values shared by the extraction engine, the stores and the CLI tools.
Rows coming out of a store are decoded into these dataclasses at the store
boundary; the engine never works on raw rows.
"""
import json
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple, Union


class Direction(str, Enum):
    """Income or expense"""
    INCOME = 'income'
    EXPENSE = 'expense'


class Source(str, Enum):
    """Where a transaction came from"""
    MANUAL = 'manual'
    SMS = 'sms'
    EMAIL = 'email'


class AlertKind(str, Enum):
    EXCEEDED = 'exceeded'
    WARNING = 'warning'


class OutcomeStatus(str, Enum):
    """Result of pushing one message through the pipeline"""
    CREATED = 'created'
    NOT_FINANCIAL = 'not_financial'
    NO_AMOUNT = 'no_amount'
    ALREADY_PROCESSED = 'already_processed'


DEFAULT_CATEGORY_NAMES = {
    Direction.INCOME: 'Other Income',
    Direction.EXPENSE: 'Other Expense',
}


@dataclass(frozen=True)
class Category:
    """Spending/earning bucket with its keyword vocabulary"""
    category_id: str
    name: str
    direction: Direction
    keywords: Tuple[str, ...] = ()
    color: str = '#95A5A6'
    icon: str = 'more-horizontal'


@dataclass(frozen=True)
class Account:
    account_id: str
    name: str
    keywords: Tuple[str, ...] = ()
    is_active: bool = True


@dataclass(frozen=True)
class ExtractionRule:
    """
    User-defined regex fast path.

    amount_group / merchant_group hold either a group index ("1") or a
    group name ("amount").
    """
    rule_id: str
    name: str
    pattern: str
    amount_group: str
    category_id: str
    merchant_group: Optional[str] = None
    account_id: Optional[str] = None
    priority: int = 100
    is_active: bool = True


@dataclass(frozen=True)
class Message:
    """Raw SMS or email as delivered by a connector"""
    message_id: str
    sender: str
    body: str
    timestamp: datetime
    subject: Optional[str] = None

    @property
    def source(self) -> Source:
        return Source.EMAIL if self.subject is not None else Source.SMS


@dataclass
class ParsedTransaction:
    """Transient result of extraction, consumed by the writer"""
    amount: Decimal
    currency: str
    description: str
    direction: Direction
    category: str
    occurred_at: datetime
    raw_text: str
    merchant: Optional[str] = None
    account: Optional[str] = None
    matched_rule_id: Optional[str] = None
    confidence: float = 1.0


@dataclass
class Transaction:
    """Persisted transaction"""
    txn_id: str
    amount: Decimal
    description: str
    category: str
    direction: Direction
    source: Source
    occurred_at: datetime
    currency: str
    account: Optional[str] = None
    merchant: Optional[str] = None
    original_amount: Optional[Decimal] = None
    original_currency: Optional[str] = None
    exchange_rate: Decimal = Decimal('1')
    needs_review: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class ProcessedMessage:
    """Dedupe ledger entry; message_id is unique"""
    entry_id: str
    message_id: str
    sender: str
    body: str
    message_timestamp: datetime
    transaction_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class Budget:
    budget_id: str
    name: str
    category: str
    amount: Decimal
    start_date: date
    end_date: date
    spent: Decimal = Decimal('0')
    period: str = 'monthly'
    is_active: bool = True

    def covers(self, when: Union[date, datetime]) -> bool:
        if isinstance(when, datetime):
            when = when.date()
        return self.start_date <= when <= self.end_date


@dataclass(frozen=True)
class AlertEvent:
    """
    Budget threshold notification.

    value is the overspend amount for EXCEEDED and the whole-number
    percentage used for WARNING.
    """
    kind: AlertKind
    budget_id: str
    budget_name: str
    value: Decimal

    def render(self) -> Tuple[str, str]:
        """Title/body pair for the notification collaborator"""
        if self.kind == AlertKind.EXCEEDED:
            return ('🚨 Budget Exceeded',
                    f"You've overspent on {self.budget_name} by {self.value:,.2f}")
        return ('⚠️ Budget Warning',
                f"You've used {self.value}% of your {self.budget_name} budget")


@dataclass
class Outcome:
    """What happened to one message"""
    message_id: str
    status: OutcomeStatus
    transaction: Optional[Transaction] = None
    alerts: List[AlertEvent] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return self.status == OutcomeStatus.CREATED


def decode_keywords(raw) -> Tuple[str, ...]:
    """
    Decode a keyword column into a tuple of lower-cased strings.

    Accepts a JSON-encoded list (as stored), an already decoded list,
    or None.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return ()
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            raw = [part for part in raw.split(',')]
    if isinstance(raw, str):
        raw = [raw]
    return tuple(str(k).strip().lower() for k in raw if str(k).strip())


def encode_keywords(keywords) -> str:
    return json.dumps(list(keywords))


def placeholder_category(direction: Direction) -> Category:
    """In-memory default category used when the store has none"""
    if direction == Direction.INCOME:
        return Category(
            category_id='default-income',
            name=DEFAULT_CATEGORY_NAMES[direction],
            direction=direction,
            color='#27AE60',
            icon='plus-circle',
        )
    return Category(
        category_id='default-expense',
        name=DEFAULT_CATEGORY_NAMES[direction],
        direction=direction,
    )
