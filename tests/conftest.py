from __future__ import annotations

import pytest

from angebot.domain.draft import Draft
from angebot.domain.models import Customer, Position, PositionType
from angebot.domain.positions import PositionList


@pytest.fixture
def customer() -> Customer:
    return Customer(
        id="c-1",
        first_name="Erika",
        last_name="Müller",
        company="Müller Bau GmbH",
        customer_number="K-1001",
        street="Hauptstraße",
        house_number="5",
        postal_code="10115",
        city="Berlin",
    )


@pytest.fixture
def draft(customer: Customer) -> Draft:
    return Draft(
        customer=customer,
        offer_number="A-2024-001",
        date="2024-05-01",
        valid_until="2024-05-15",
        title="Angebot – Müller Bau GmbH",
        intro="Wir haben folgende Leistungen zusammengestellt:",
        tax_rate=19.0,
        positions=PositionList([
            Position(PositionType.HEADING, "Bad"),
            Position(PositionType.ITEM, "Fliesen", 10.0, "m²", 10.0),
            Position(PositionType.SUBTOTAL, "Zwischensumme"),
            Position(PositionType.ITEM, "Silikon", 2.0, "Stk.", 10.0),
        ]),
    )
