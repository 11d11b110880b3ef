from __future__ import annotations

import pytest

from deployment_runner.accounts import (
    derive_account_id,
    factory_token_name,
    format_price,
    format_title,
    is_valid_account_id,
    is_valid_symbol,
)


def test_derive_account_id_concatenates_with_dot():
    assert derive_account_id("near_6", "factory.testnet") == "near_6.factory.testnet"


@pytest.mark.parametrize("base_id", ["dev-1634.testnet", "a.b.c", "factory.near"])
def test_derive_account_id_is_consistent(base_id):
    assert derive_account_id("near_6", base_id) == "near_6." + base_id
    assert derive_account_id("near_6", base_id) == derive_account_id("near_6", base_id)


@pytest.mark.parametrize(
    "account_id",
    ["factory.testnet", "near_6.factory.testnet", "wrap.near", "dev-1634-42.testnet", "ab"],
)
def test_valid_account_ids(account_id):
    assert is_valid_account_id(account_id)


@pytest.mark.parametrize(
    "account_id",
    ["", None, "a", "Factory.testnet", "bad..dots", ".leading", "trailing.", "under__score", "x" * 65, "has space"],
)
def test_invalid_account_ids(account_id):
    assert not is_valid_account_id(account_id)


def test_symbol_rules():
    assert is_valid_symbol("near")
    assert is_valid_symbol("w-near_2")
    assert not is_valid_symbol("NEAR")
    assert not is_valid_symbol("near token")


def test_format_title_strips_whitespace():
    assert format_title(" ne ar\t") == "near"


def test_format_price():
    assert format_price(150000) == "15"
    assert format_price(150500) == "15.500"
    assert format_price(5) == "0.5"


def test_factory_token_name():
    assert factory_token_name("near", 150000) == "near-15-0000"
    assert factory_token_name("Wrapped NEAR", 152500) == "wrappednear-15-2500"
