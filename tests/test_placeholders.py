from datetime import date

from angebot.domain.placeholders import replace_placeholders


def test_replaces_customer_tokens(customer):
    text = "Sehr geehrte Frau {{customer.last_name}}, Angebot für {{customer.display_name}} vom {{today}}"
    out = replace_placeholders(text, customer, date(2024, 5, 1))
    assert out == "Sehr geehrte Frau Müller, Angebot für Müller Bau GmbH vom 2024-05-01"


def test_address_token_is_multiline(customer):
    out = replace_placeholders("{{customer.address}}", customer)
    assert out == "Müller Bau GmbH\nHauptstraße 5\n10115 Berlin"


def test_unknown_tokens_stay_literal(customer):
    assert replace_placeholders("{{customer.shoe_size}}", customer) == "{{customer.shoe_size}}"


def test_missing_fields_become_empty():
    out = replace_placeholders("[{{customer.company}}|{{customer.city}}]", {"first_name": "Max"})
    assert out == "[|]"


def test_empty_text_is_returned_unchanged(customer):
    assert replace_placeholders("", customer) == ""
    assert replace_placeholders(None, customer) is None
