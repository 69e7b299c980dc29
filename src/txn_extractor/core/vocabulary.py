"""
Classification vocabulary

Categories, accounts and rules read from the store, held as an immutable
snapshot. The cache owns the current snapshot and swaps it on reload;
readers keep whichever snapshot they were handed.
"""
import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from ..models import Account, Category, Direction, ExtractionRule, decode_keywords

DEFAULT_CATEGORIES_FILE = Path(__file__).parent.parent / "data" / "default_categories.json"


def load_default_categories(path: Optional[Path] = None) -> List[Category]:
    """
    Load the standard income/expense categories

    Args:
        path: JSON file (default: the packaged default_categories.json)

    Returns:
        Categories in file order
    """
    with open(path or DEFAULT_CATEGORIES_FILE, "r", encoding="utf-8") as f:
        data = json.load(f)

    return [
        Category(
            category_id=cat["category_id"],
            name=cat["name"],
            direction=Direction(cat["direction"]),
            keywords=decode_keywords(cat.get("keywords")),
            color=cat.get("color", "#95A5A6"),
            icon=cat.get("icon", "more-horizontal"),
        )
        for cat in data["categories"]
    ]


@dataclass(frozen=True)
class Vocabulary:
    categories: Tuple[Category, ...] = ()
    accounts: Tuple[Account, ...] = ()
    rules: Tuple[ExtractionRule, ...] = ()


class VocabularyCache:
    """
    Reload-on-demand holder of the current Vocabulary
    """

    def __init__(self, store):
        self.store = store
        self._lock = threading.Lock()
        self._snapshot: Optional[Vocabulary] = None

    def reload(self) -> Vocabulary:
        """Read the store again and publish a new snapshot"""
        snapshot = Vocabulary(
            categories=tuple(self.store.get_categories()),
            accounts=tuple(self.store.get_accounts()),
            rules=tuple(self.store.get_rules()),
        )
        with self._lock:
            self._snapshot = snapshot

        print(f"✅ Loaded {len(snapshot.categories)} categories, "
              f"{len(snapshot.accounts)} accounts, {len(snapshot.rules)} rules")
        return snapshot

    def snapshot(self) -> Vocabulary:
        with self._lock:
            snapshot = self._snapshot
        return snapshot if snapshot is not None else self.reload()
