# backend/records.py
"""Turn transaction-store records into settlement Transactions.

A record looks like {"paid_by": "Ana", "amount": 12.5, "participants": ["Ana", "Bo"], "date": "2024-05-01"}.
The engine trusts its input, so everything is checked here first.
"""
import math

from backend.exceptions import InvalidTransactionError
from backend.settlement import Transaction

MISSING_DEFAULT = "default"
MISSING_NONE = "none"


def _parse_amount(value, index):
    # A missing amount counts as nothing spent
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise InvalidTransactionError(f"amount must be a number, got {value!r}", index)
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidTransactionError(f"amount must be a number, got {value!r}", index)
    if not math.isfinite(amount):
        raise InvalidTransactionError("amount must be finite", index)
    if amount < 0:
        raise InvalidTransactionError("amount must not be negative", index)
    return amount


def _check_person(name, known, field, index):
    if not isinstance(name, str) or not name.strip():
        raise InvalidTransactionError(f"{field} must be a non-empty string", index)
    if known and name not in known:
        raise InvalidTransactionError(f"{field} {name!r} is not a known participant", index)


def transaction_from_record(record, index=None, known_participants=None,
                            default_participants=None, missing_policy=MISSING_NONE):
    if not isinstance(record, dict):
        raise InvalidTransactionError("record must be an object", index)

    payer = record.get("paid_by", record.get("payer"))
    _check_person(payer, known_participants, "paid_by", index)

    amount = _parse_amount(record.get("amount"), index)

    participants = record.get("participants")
    if participants is None:
        if missing_policy == MISSING_DEFAULT:
            participants = list(default_participants or [])
        else:
            participants = []
    if not isinstance(participants, (list, tuple)):
        raise InvalidTransactionError("participants must be a list", index)
    for person in participants:
        _check_person(person, known_participants, "participant", index)

    date = record.get("date")
    if date is not None and not isinstance(date, str):
        raise InvalidTransactionError("date must be an ISO date string", index)

    return Transaction(payer, amount, participants, date=date)


def transactions_from_records(records, known_participants=None,
                              default_participants=None, missing_policy=MISSING_NONE):
    if not isinstance(records, (list, tuple)):
        raise InvalidTransactionError("expected a list of transactions")

    return [
        transaction_from_record(record, index, known_participants, default_participants, missing_policy)
        for index, record in enumerate(records)
    ]


def transactions_from_settings(records, settings):
    return transactions_from_records(
        records,
        known_participants=settings.KNOWN_PARTICIPANTS,
        default_participants=settings.DEFAULT_PARTICIPANTS,
        missing_policy=settings.MISSING_PARTICIPANTS_POLICY,
    )
