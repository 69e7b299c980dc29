from datetime import datetime

import pytest

from txn_extractor.core.message_reader import compute_message_id, parse_timestamp, read_messages
from txn_extractor.models import OutcomeStatus, Source

CSV = """id,sender,body,subject,timestamp
m1,GCB-BANK,GHS 5.00 debited from your account,,2025-03-14 10:30:00
,MTN MoMo,You have received GHS 20.00,,1741948200000
,Jumia,Total GHS 80.00,Your order receipt,2025-03-14T09:00:00
"""


@pytest.fixture
def export(tmp_path):
    path = tmp_path / "messages.csv"
    path.write_text(CSV, encoding="utf-8")
    return path


def test_read_messages(export):
    sms, momo, email = read_messages(export)

    assert sms.message_id == "m1"
    assert sms.source == Source.SMS
    assert sms.timestamp == datetime(2025, 3, 14, 10, 30)

    assert len(momo.message_id) == 32
    assert momo.timestamp == datetime.fromtimestamp(1741948200)

    assert email.source == Source.EMAIL
    assert email.subject == "Your order receipt"


def test_generated_ids_are_stable(export):
    assert [m.message_id for m in read_messages(export)] == [m.message_id for m in read_messages(export)]


def test_forced_source(export):
    assert all(m.source == Source.SMS for m in read_messages(export, Source.SMS))
    assert all(m.source == Source.EMAIL for m in read_messages(export, Source.EMAIL))


def test_parse_timestamp_formats():
    assert parse_timestamp("30/01/2025 14:05") == datetime(2025, 1, 30, 14, 5)
    assert parse_timestamp("2025-01-30") == datetime(2025, 1, 30)
    assert parse_timestamp("1738245900") == datetime.fromtimestamp(1738245900)
    assert parse_timestamp("2025-01-30T14:05:00.250") == datetime(2025, 1, 30, 14, 5, 0, 250000)


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")
    with pytest.raises(ValueError):
        parse_timestamp("")


def test_compute_message_id_uses_occurrence():
    row = {"sender": "GCB", "timestamp": "1", "body": "x"}
    assert compute_message_id(row, 0) != compute_message_id(row, 1)


def test_reexport_with_new_rows_keeps_ids(tmp_path):
    old_row = ",GCB-BANK,GHS 5.00 debited from your account,,2025-03-14 10:30:00\n"
    new_row = ",GCB-BANK,GHS 9.00 debited from your account,,2025-03-15 08:00:00\n"
    header = "id,sender,body,subject,timestamp\n"

    first = tmp_path / "first.csv"
    first.write_text(header + old_row, encoding="utf-8")
    second = tmp_path / "second.csv"
    second.write_text(header + new_row + old_row, encoding="utf-8")

    [old] = read_messages(first)
    assert read_messages(second)[1].message_id == old.message_id


def test_identical_rows_get_distinct_ids(tmp_path):
    row = ",MTN MoMo,You have received GHS 20.00,,2025-03-14 10:30:00\n"
    path = tmp_path / "dupes.csv"
    path.write_text("id,sender,body,subject,timestamp\n" + row + row, encoding="utf-8")

    first, second = read_messages(path)
    assert first.message_id != second.message_id


def test_reimport_books_only_new_messages(tmp_path, pipeline, store):
    header = "id,sender,body,subject,timestamp\n"
    old_row = ",GCB-BANK,GHS 5.00 debited from your account,,2025-03-14 10:30:00\n"
    new_row = ",GCB-BANK,GHS 9.00 debited from your account,,2025-03-15 08:00:00\n"
    first = tmp_path / "first.csv"
    first.write_text(header + old_row, encoding="utf-8")
    second = tmp_path / "second.csv"
    second.write_text(header + new_row + old_row, encoding="utf-8")

    pipeline.process_batch(read_messages(first), pause=0)
    outcomes = pipeline.process_batch(read_messages(second), pause=0)

    assert [o.status for o in outcomes] == [OutcomeStatus.CREATED, OutcomeStatus.ALREADY_PROCESSED]
    assert len(store.list_transactions()) == 2
