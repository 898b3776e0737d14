"""
tests/test_messages.py

Execute and query message dispatch.
"""

import pytest

from conftest import COLLECTION, TOKEN, coin
from nftmarket.core.exceptions import (
    SaleNotFound,
    UnsupportedOperation,
    ValidationError,
)
from nftmarket.runtime import messages


SALE = {
    "contract_address": COLLECTION,
    "token_id": TOKEN,
    "price": {"denom": "u", "amount": "1000"},
}


class TestExecute:

    def test_create_sale_and_buy(self, market):
        messages.execute(market, "seller", {"create_sale": SALE})
        response = messages.execute(
            market, "buyer",
            {"buy": {"contract_address": COLLECTION, "token_id": TOKEN}},
            [coin(1000)],
        )
        assert response.events[0].kind == "buy"

    def test_register_collection(self, market):
        messages.execute(market, "admin", {"register_collection": {
            "contract_address": COLLECTION,
            "royalty_percentage": 10,
            "royalty_payment_address": "royalty",
        }})
        assert messages.query(market, {"get_collection": {"contract_address": COLLECTION}}) == {
            "royalty_percentage": 10,
            "royalty_payment_address": "royalty",
            "is_paused": False,
        }

    def test_update_collection_requires_pause_flag(self, market):
        messages.execute(market, "admin", {"register_collection": {"contract_address": COLLECTION}})
        with pytest.raises(ValidationError):
            messages.execute(market, "admin", {"update_collection": {"contract_address": COLLECTION}})

    def test_admin_remove_sales(self, market):
        messages.execute(market, "seller", {"update_sale": SALE})
        messages.execute(market, "admin", {"admin_remove_sales": {
            "contract_address": COLLECTION, "token_id": TOKEN,
        }})
        with pytest.raises(SaleNotFound):
            market.get_sale(COLLECTION, TOKEN)

    def test_update_ownership_forms(self, market):
        messages.execute(market, "admin", {"update_ownership": {
            "transfer_ownership": {"new_owner": "newadmin"},
        }})
        messages.execute(market, "newadmin", {"update_ownership": "accept_ownership"})
        assert messages.query(market, {"get_ownership": {}}) == {
            "owner": "newadmin", "pending_owner": None,
        }

    def test_unknown_ownership_action(self, market):
        with pytest.raises(ValidationError):
            messages.execute(market, "admin", {"update_ownership": "seize_ownership"})

    def test_funds_only_accepted_by_buy(self, market):
        with pytest.raises(ValidationError):
            messages.execute(
                market, "admin", {"update_taker_fee": {"taker_fee": 3}}, [coin(1)]
            )
        assert market.get_taker_fee() == 5

    @pytest.mark.parametrize("name", [
        "accept_collection_offer",
        "create_collection_offer",
        "remove_collection_offer",
    ])
    def test_offer_messages_unsupported(self, market, name):
        with pytest.raises(UnsupportedOperation):
            messages.execute(market, "seller", {name: {}})

    @pytest.mark.parametrize("msg", [
        {"launch_rocket": {}},
        {"create_sale": SALE, "buy": {}},
        "create_sale",
    ])
    def test_malformed_messages_rejected(self, market, msg):
        with pytest.raises(ValidationError):
            messages.execute(market, "seller", msg)

    def test_missing_field_rejected(self, market):
        with pytest.raises(ValidationError):
            messages.execute(market, "seller", {"create_sale": {"contract_address": COLLECTION}})

    def test_superscript_price_amount_rejected(self, market):
        body = dict(SALE, price={"denom": "u", "amount": "\u00b2"})
        with pytest.raises(ValidationError):
            messages.execute(market, "seller", {"create_sale": body})


class TestQuery:

    def test_get_sale(self, listed):
        assert messages.query(listed, {"get_sale": {
            "contract_address": COLLECTION, "token_id": TOKEN,
        }}) == {"owner_address": "seller", "price": {"denom": "u", "amount": "1000"}}

    def test_get_taker_fee(self, market):
        assert messages.query(market, {"get_taker_fee": {}}) == {"taker_fee": 5}

    @pytest.mark.parametrize("name", ["get_sales", "get_collections"])
    def test_paginated_queries_unsupported(self, market, name):
        with pytest.raises(UnsupportedOperation):
            messages.query(market, {name: {}})

    def test_unknown_query_rejected(self, market):
        with pytest.raises(ValidationError):
            messages.query(market, {"get_everything": {}})
