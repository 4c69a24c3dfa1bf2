import pytest

from backend.app import create_app
from backend.config import Settings
from backend.settlement import Transaction
from backend.store import TransactionStore


@pytest.fixture
def settings():
    """Three known participants, records without participants split between Ana and Bruno."""
    return Settings(
        _env_file=None,
        KNOWN_PARTICIPANTS=["Ana", "Bruno", "Carla"],
        DEFAULT_PARTICIPANTS=["Ana", "Bruno"],
        MISSING_PARTICIPANTS_POLICY="default",
    )


@pytest.fixture
def store():
    """Return an empty in-memory transaction store."""
    return TransactionStore()


@pytest.fixture
def app(settings, store):
    app = create_app(settings, store)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture
def make_transaction():
    """Shorthand for building Transactions in tests."""
    def _make(payer, amount, participants, date=None):
        return Transaction(payer, amount, participants, date=date)
    return _make
