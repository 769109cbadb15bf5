"""Shared pytest fixtures for momoetl tests."""

import logging
import os
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

from momoetl.config import Settings
from momoetl.database.factories import create_sqlite_database
from momoetl.domain.audit import AuditLogger
from momoetl.domain.category import CategoryService
from momoetl.domain.entities import PartyType
from momoetl.domain.loader import LedgerLoader
from momoetl.domain.party import PartyService
from momoetl.domain.pipeline import Pipeline


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI installs so they don't outlive the CliRunner streams."""
    yield
    package_logger = logging.getLogger("momoetl")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def settings(tmp_path):
    """Settings with the dead-letter directory under tmp_path."""
    return Settings(dead_letter_dir=str(tmp_path / "dead_letter"))


@pytest.fixture
def party_service(temp_db):
    """Create a PartyService with a temporary database."""
    return PartyService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def audit(temp_db):
    """Create an AuditLogger with a fixed batch ID."""
    return AuditLogger(temp_db, batch_id="test-batch")


@pytest.fixture
def loader(temp_db, audit):
    """Create a LedgerLoader with the default 1% fee policy."""
    return LedgerLoader(temp_db, audit=audit)


@pytest.fixture
def pipeline(temp_db, settings):
    """Create a Pipeline writing dead letters under tmp_path."""
    return Pipeline(temp_db, settings=settings)


@pytest.fixture
def sample_parties(party_service, category_service):
    """Seed categories and the sample parties; return party IDs by phone."""
    category_service.ensure_defaults()
    party_service.seed_sample()
    return {p.phone_number: p.id for p in party_service.list_parties()}


@pytest.fixture
def funded_party(party_service):
    """Register a party holding 100.00 USD."""

    def _create(name: str, phone: str, balance: str = "100.00", party_type=PartyType.INDIVIDUAL) -> int:
        return party_service.register_party(
            name=name,
            phone_number=phone,
            party_type=party_type,
            opening_balance=Decimal(balance),
        )

    return _create


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


def balance_of(db, phone_number: str, currency: str = "USD") -> Decimal:
    """Current balance of a party's default account."""
    party = db.get_party_by_phone(phone_number)
    return db.get_default_account(party.id, currency).current_balance
