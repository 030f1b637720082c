"""Shared fixtures."""

import pytest

from kegelbuch.audit import AuditLogger
from kegelbuch.models.ledger import Configuration, PenaltyDefinition
from kegelbuch.services.storage import InMemoryStorage


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def kegel_config():
    """Entry fee 6.00, Kalle (normal, 0.50), Kranz (inverted, 0.50)."""
    return Configuration(
        entry_fee=6.0,
        penalties=[
            PenaltyDefinition(id="kalle", label="Kalle", unit_price=0.5),
            PenaltyDefinition(id="kranz", label="Kranz", unit_price=0.5, inverted=True),
        ],
    )
