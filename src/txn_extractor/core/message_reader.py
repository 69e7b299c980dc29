"""
Message export reader

Reads exported SMS/email messages from CSV (id,sender,body,subject,timestamp)
into Message objects for the pipeline.
"""
import csv
import hashlib
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..models import Message, Source

DATE_FORMATS = [
    '%Y-%m-%dT%H:%M:%S',     # 2025-01-30T14:05:00
    '%Y-%m-%d %H:%M:%S',     # 2025-01-30 14:05:00
    '%Y-%m-%d %H:%M',        # 2025-01-30 14:05
    '%Y-%m-%d',              # 2025-01-30
    '%d/%m/%Y %H:%M',        # 30/01/2025 14:05
    '%d/%m/%Y',              # 30/01/2025
    '%m/%d/%Y',              # 01/30/2025
]


def parse_timestamp(value: str) -> datetime:
    """
    Parse a message timestamp

    Accepts ISO-8601, the formats in DATE_FORMATS, or epoch milliseconds
    (as written by phone SMS exports).
    """
    value = (value or '').strip()
    if not value:
        raise ValueError("Missing timestamp")

    if value.isdigit():
        # Epoch seconds or milliseconds
        seconds = int(value) / 1000 if len(value) > 10 else int(value)
        return datetime.fromtimestamp(seconds)

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    # Offsets and fractional seconds
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Could not parse timestamp: {value}") from None


def message_key(row: Dict[str, str]) -> str:
    return f"{row.get('sender', '').strip()}|{row.get('timestamp', '').strip()}|{row.get('body', '')}"


def compute_message_id(row: Dict[str, str], occurrence: int = 0) -> str:
    """
    Stable id for exports without one.
    Uses sender, timestamp, body AND how many identical rows came before it
    in the same file, so re-exports with new rows added keep their ids.
    """
    hash_input = f"{message_key(row)}|{occurrence}"
    return hashlib.sha256(hash_input.encode()).hexdigest()[:32]


def read_messages(csv_path: Path, source: Optional[Source] = None) -> List[Message]:
    """
    Read a message export

    Args:
        csv_path: Path to CSV file
        source: Force SMS or EMAIL; by default a non-empty subject means email

    Returns:
        Messages in file order
    """
    messages = []
    seen = Counter()

    with open(csv_path, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            row = {k.strip().lower(): (v or '') for k, v in row.items() if k}

            subject = row.get('subject', '').strip() or None
            if source == Source.SMS:
                subject = None
            elif source == Source.EMAIL and subject is None:
                subject = ''

            message_id = row.get('id', '').strip()
            if not message_id:
                key = message_key(row)
                message_id = compute_message_id(row, seen[key])
                seen[key] += 1

            messages.append(Message(
                message_id=message_id,
                sender=row.get('sender', '').strip(),
                body=row.get('body', ''),
                timestamp=parse_timestamp(row.get('timestamp', '')),
                subject=subject,
            ))

    return messages
