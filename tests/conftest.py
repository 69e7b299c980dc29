import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from txn_extractor.config import Settings  # noqa: E402
from txn_extractor.core.pipeline import IngestionPipeline  # noqa: E402
from txn_extractor.core.vocabulary import load_default_categories  # noqa: E402
from txn_extractor.models import Budget, Message  # noqa: E402
from txn_extractor.storage.memory import InMemoryStore  # noqa: E402

SCENARIO_1 = "GHS 500.00 has been debited from your account ending 1234 at SHOPRITE"
SCENARIO_2 = "Payment received for GHS 123.00 from JANE SMITH"


@pytest.fixture
def categories():
    return load_default_categories()


@pytest.fixture
def store(categories):
    return InMemoryStore(categories=categories)


@pytest.fixture
def settings():
    return Settings(batch_pause_seconds=0)


@pytest.fixture
def pipeline(store, settings):
    return IngestionPipeline(store, settings=settings)


@pytest.fixture
def make_message():
    def _make(body, sender="GCB-BANK", message_id="msg-1", subject=None,
              timestamp=datetime(2025, 3, 14, 10, 30)):
        return Message(
            message_id=message_id,
            sender=sender,
            body=body,
            timestamp=timestamp,
            subject=subject,
        )
    return _make


@pytest.fixture
def shopping_budget(store):
    budget = Budget(
        budget_id="b-shopping",
        name="Shopping",
        category="Shopping",
        amount=Decimal("1000"),
        start_date=date(2025, 3, 1),
        end_date=date(2025, 3, 31),
    )
    store.save_budget(budget)
    return budget
