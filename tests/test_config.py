from datetime import timedelta
from decimal import Decimal

import pytest

from vitrina.config import Settings


def test_defaults_match_storefront_pricing():
    settings = Settings()

    assert settings.tax_rate == Decimal("0.19")
    assert settings.free_shipping_threshold == Decimal("200000")
    assert settings.shipping_fee == Decimal("15000")
    assert settings.currency == "COP"


def test_from_env_overrides_and_keeps_defaults():
    settings = Settings.from_env({
        "VITRINA_TAX_RATE": "0.08",
        "VITRINA_CURRENCY": "usd",
        "VITRINA_PAYMENT_TIMEOUT": "0",
        "VITRINA_STOCK_CHECK_TIMEOUT": "2.5",
    })

    assert settings.tax_rate == Decimal("0.08")
    assert settings.currency == "USD"
    assert settings.payment_timeout is None
    assert settings.stock_check_timeout == timedelta(seconds=2.5)
    assert settings.shipping_fee == Decimal("15000")


@pytest.mark.parametrize(
    "env",
    [
        {"VITRINA_TAX_RATE": "abc"},
        {"VITRINA_SHIPPING_FEE": "-1"},
        {"VITRINA_PAYMENT_TIMEOUT": "soon"},
    ],
)
def test_from_env_rejects_malformed_values(env):
    with pytest.raises(ValueError):
        Settings.from_env(env)


def test_fluent_modifiers_return_new_settings():
    base = Settings()
    changed = base.with_storage_key("other").without_timeouts()

    assert base.storage_key == "vitrina:cart"
    assert changed.storage_key == "other"
    assert changed.payment_timeout is None


def test_with_timeouts_keeps_an_explicit_zero():
    settings = Settings().with_timeouts(stock=timedelta(0))

    assert settings.stock_check_timeout == timedelta(0)
    assert settings.payment_timeout == timedelta(seconds=30)
