import pytest

from backend.exceptions import GroupTabError, InvalidTransactionError
from backend.records import transaction_from_record, transactions_from_records, transactions_from_settings


class TestTransactionFromRecord:
    """Store records -> Transactions."""

    def test_plain_record(self):
        t = transaction_from_record({"paid_by": "Ana", "amount": 42.5, "participants": ["Ana", "Bruno"],
                                     "date": "2024-03-01"})
        assert t.payer == "Ana"
        assert t.amount == 42.5
        assert t.participants == ["Ana", "Bruno"]
        assert t.date == "2024-03-01"

    def test_null_amount_is_zero(self):
        t = transaction_from_record({"paid_by": "Ana", "amount": None, "participants": ["Ana", "Bruno"]})
        assert t.amount == 0.0

    def test_numeric_string_amount(self):
        t = transaction_from_record({"paid_by": "Ana", "amount": "19.90", "participants": ["Bruno"]})
        assert t.amount == 19.9

    def test_payer_key_is_accepted(self):
        t = transaction_from_record({"payer": "Ana", "amount": 10, "participants": ["Bruno"]})
        assert t.payer == "Ana"

    def test_missing_participants_default_policy(self):
        t = transaction_from_record({"paid_by": "Ana", "amount": 10},
                                    default_participants=["Ana", "Bruno"], missing_policy="default")
        assert t.participants == ["Ana", "Bruno"]

    def test_missing_participants_none_policy(self):
        t = transaction_from_record({"paid_by": "Ana", "amount": 10, "participants": None},
                                    default_participants=["Ana", "Bruno"], missing_policy="none")
        assert t.participants == []

    @pytest.mark.parametrize("amount", [-1, float("nan"), float("inf"), "abc", True])
    def test_bad_amount_rejected(self, amount):
        with pytest.raises(InvalidTransactionError):
            transaction_from_record({"paid_by": "Ana", "amount": amount, "participants": ["Ana"]})

    @pytest.mark.parametrize("payer", [None, "", "   ", 7])
    def test_bad_payer_rejected(self, payer):
        with pytest.raises(InvalidTransactionError):
            transaction_from_record({"paid_by": payer, "amount": 1, "participants": ["Ana"]})

    def test_participants_must_be_a_list(self):
        with pytest.raises(InvalidTransactionError):
            transaction_from_record({"paid_by": "Ana", "amount": 1, "participants": "Ana,Bruno"})

    def test_unknown_participant_rejected(self):
        with pytest.raises(InvalidTransactionError, match="Zeca"):
            transaction_from_record({"paid_by": "Ana", "amount": 1, "participants": ["Ana", "Zeca"]},
                                    known_participants=["Ana", "Bruno"])

    def test_record_must_be_an_object(self):
        with pytest.raises(InvalidTransactionError):
            transaction_from_record(["Ana", 10])


class TestTransactionsFromRecords:

    def test_error_carries_index(self):
        records = [
            {"paid_by": "Ana", "amount": 10, "participants": ["Ana"]},
            {"paid_by": "Ana", "amount": -10, "participants": ["Ana"]},
        ]
        with pytest.raises(InvalidTransactionError) as excinfo:
            transactions_from_records(records)
        assert excinfo.value.index == 1
        assert str(excinfo.value).startswith("Transaction 1:")

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            transactions_from_records({"paid_by": "Ana"})
        assert issubclass(InvalidTransactionError, GroupTabError)

    def test_settings_drive_defaults(self, settings):
        transactions = transactions_from_settings([{"paid_by": "Carla", "amount": 20}], settings)
        assert transactions[0].participants == ["Ana", "Bruno"]
