"""
tests/test_listing.py

Authorization guard, collection administration and sale listings.

Every rejected call must raise exactly its error and leave the store
as it was.
"""

import pytest

from conftest import COLLECTION, TOKEN, coin
from nftmarket.core.exceptions import (
    CollectionAlreadyRegistered,
    CollectionNotFound,
    DenomNotSupported,
    FeeConfigurationError,
    InvalidAddress,
    InvalidPercentage,
    InvalidPrice,
    NotApproved,
    RegistryQueryError,
    SaleDoesNotExist,
    SaleNotFound,
    Unauthorized,
    ValidationError,
)
from nftmarket.core.models import Coin, Collection, Sale


def snapshot(market):
    return dict(market.store.backend._data)


# ─────────────────────────────────────────────────────────────
# Guard
# ─────────────────────────────────────────────────────────────

class TestAuthorizationGuard:

    def test_admin_passes(self, market):
        market.guard.assert_admin("admin")

    def test_non_admin_rejected(self, market):
        with pytest.raises(Unauthorized):
            market.guard.assert_admin("seller")

    def test_token_owner_passes(self, market):
        market.guard.assert_token_owner(COLLECTION, TOKEN, "seller")

    def test_non_owner_rejected(self, market):
        with pytest.raises(Unauthorized):
            market.guard.assert_token_owner(COLLECTION, TOKEN, "buyer")

    def test_unknown_token_propagates_registry_error(self, market):
        with pytest.raises(RegistryQueryError):
            market.guard.assert_token_owner(COLLECTION, "404", "seller")

    def test_missing_approval_is_not_approved(self, market, registry):
        registry.revoke(COLLECTION, TOKEN, "market")
        with pytest.raises(NotApproved):
            market.guard.assert_marketplace_approved(COLLECTION, TOKEN)

    def test_approval_of_other_operator_does_not_count(self, market, registry):
        registry.revoke(COLLECTION, TOKEN, "market")
        registry.approve(COLLECTION, TOKEN, "othermarket")
        with pytest.raises(NotApproved):
            market.guard.assert_marketplace_approved(COLLECTION, TOKEN)


# ─────────────────────────────────────────────────────────────
# Collections
# ─────────────────────────────────────────────────────────────

class TestRegisterCollection:

    def test_register_stores_record_and_emits_event(self, market):
        response = market.register_collection("admin", COLLECTION, 10, "royalty")

        assert market.get_collection(COLLECTION) == Collection(10, "royalty", False)
        event = response.events[0]
        assert event.kind == "register_collection"
        assert event.get("contract_address") == COLLECTION
        assert event.get("royalty_percentage") == "10"
        assert event.get("royalty_payment_address") == "royalty"

    def test_register_without_royalty_renders_null(self, market):
        response = market.register_collection("admin", COLLECTION)
        assert response.events[0].get("royalty_percentage") == "null"
        assert response.events[0].get("royalty_payment_address") == "null"

    def test_non_admin_rejected(self, market):
        before = snapshot(market)
        with pytest.raises(Unauthorized):
            market.register_collection("seller", COLLECTION, 10, "royalty")
        assert snapshot(market) == before

    # taker fee is 5, so 99 breaks the fee total
    @pytest.mark.parametrize("percentage,address", [
        (20, "other"),
        (99, "royalty"),
        (101, "royalty"),
        (10, "Bad Addr"),
    ])
    def test_already_registered_leaves_record_unchanged(self, market, percentage, address):
        market.register_collection("admin", COLLECTION, 10, "royalty")
        with pytest.raises(CollectionAlreadyRegistered):
            market.register_collection("admin", COLLECTION, percentage, address)
        assert market.get_collection(COLLECTION) == Collection(10, "royalty")

    def test_percentage_over_100_rejected(self, market):
        with pytest.raises(InvalidPercentage):
            market.register_collection("admin", COLLECTION, 101, "royalty")

    def test_fee_total_enforced(self, market):
        # taker fee is 5
        with pytest.raises(FeeConfigurationError):
            market.register_collection("admin", COLLECTION, 96, "royalty")
        market.register_collection("admin", COLLECTION, 95, "royalty")

    def test_invalid_payment_address_rejected(self, market):
        before = snapshot(market)
        with pytest.raises(InvalidAddress):
            market.register_collection("admin", COLLECTION, 10, "Royalty Wallet")
        assert snapshot(market) == before


class TestUpdateCollection:

    def test_update_replaces_record(self, market):
        market.register_collection("admin", COLLECTION, 10, "royalty")
        response = market.update_collection("admin", COLLECTION, None, None, True)

        assert market.get_collection(COLLECTION) == Collection(None, None, True)
        event = response.events[0]
        assert event.kind == "update_collection"
        assert event.get("is_paused") == "true"

    @pytest.mark.parametrize("percentage,address,is_paused", [
        (10, "royalty", False),
        (99, "royalty", False),
        (101, "royalty", False),
        (10, "Bad Addr", False),
        (10, "royalty", "yes"),
    ])
    def test_unregistered_collection_not_created(self, market, percentage, address, is_paused):
        with pytest.raises(CollectionNotFound):
            market.update_collection("admin", COLLECTION, percentage, address, is_paused)
        with pytest.raises(CollectionNotFound):
            market.get_collection(COLLECTION)

    def test_non_admin_rejected(self, market):
        market.register_collection("admin", COLLECTION, 10, "royalty")
        with pytest.raises(Unauthorized):
            market.update_collection("seller", COLLECTION, 0, None)
        assert market.get_collection(COLLECTION).royalty_percentage == 10

    def test_non_bool_pause_flag_rejected(self, market):
        market.register_collection("admin", COLLECTION)
        with pytest.raises(ValidationError):
            market.update_collection("admin", COLLECTION, is_paused="yes")


# ─────────────────────────────────────────────────────────────
# Sales
# ─────────────────────────────────────────────────────────────

class TestCreateSale:

    def test_owner_lists_token(self, market):
        response = market.create_sale("seller", COLLECTION, TOKEN, coin(1000))

        assert market.get_sale(COLLECTION, TOKEN) == Sale("seller", coin(1000))
        event = response.events[0]
        assert event.kind == "update_sale"
        assert event.get("contract_address") == COLLECTION
        assert event.get("token_id") == TOKEN
        assert event.get("price") == "1000"

    def test_relisting_overwrites_price(self, listed):
        listed.update_sale("seller", COLLECTION, TOKEN, coin(2000))
        assert listed.get_sale(COLLECTION, TOKEN).price == coin(2000)

    def test_listing_does_not_need_registered_collection(self, market):
        market.create_sale("seller", COLLECTION, TOKEN, coin(1000))
        with pytest.raises(CollectionNotFound):
            market.get_collection(COLLECTION)

    @pytest.mark.parametrize("caller,price,prepare,error", [
        ("buyer",  1000, None,     Unauthorized),
        ("seller", 1000, "revoke", NotApproved),
        ("seller", 0,    None,     InvalidPrice),
    ])
    def test_rejections_write_nothing(self, market, registry, caller, price, prepare, error):
        if prepare == "revoke":
            registry.revoke(COLLECTION, TOKEN, "market")
        before = snapshot(market)
        with pytest.raises(error):
            market.create_sale(caller, COLLECTION, TOKEN, coin(price))
        assert snapshot(market) == before

    def test_wrong_denom_rejected(self, market):
        with pytest.raises(DenomNotSupported):
            market.create_sale("seller", COLLECTION, TOKEN, Coin("uatom", 1000))
        with pytest.raises(SaleNotFound):
            market.get_sale(COLLECTION, TOKEN)

    def test_owner_check_precedes_approval_check(self, market, registry):
        registry.revoke(COLLECTION, TOKEN, "market")
        with pytest.raises(Unauthorized):
            market.create_sale("buyer", COLLECTION, TOKEN, coin(1000))

    def test_unknown_token_rejected(self, market):
        with pytest.raises(RegistryQueryError):
            market.create_sale("seller", COLLECTION, "404", coin(1000))


class TestRemoveSale:

    def test_owner_removes_listing(self, listed):
        response = listed.remove_sale("seller", COLLECTION, TOKEN)
        assert response.events[0].kind == "remove_sale"
        with pytest.raises(SaleNotFound):
            listed.get_sale(COLLECTION, TOKEN)

    def test_owner_remove_is_idempotent(self, listed):
        listed.remove_sale("seller", COLLECTION, TOKEN)
        response = listed.remove_sale("seller", COLLECTION, TOKEN)
        assert response.events[0].kind == "remove_sale"

    def test_non_owner_rejected(self, listed):
        with pytest.raises(Unauthorized):
            listed.remove_sale("buyer", COLLECTION, TOKEN)
        assert listed.get_sale(COLLECTION, TOKEN).owner_address == "seller"

    def test_admin_remove(self, listed):
        listed.admin_remove_sale("admin", COLLECTION, TOKEN)
        with pytest.raises(SaleNotFound):
            listed.get_sale(COLLECTION, TOKEN)

    def test_admin_remove_twice_raises(self, listed):
        listed.admin_remove_sale("admin", COLLECTION, TOKEN)
        with pytest.raises(SaleDoesNotExist):
            listed.admin_remove_sale("admin", COLLECTION, TOKEN)

    def test_admin_remove_requires_admin(self, listed):
        with pytest.raises(Unauthorized):
            listed.admin_remove_sale("seller", COLLECTION, TOKEN)
        assert listed.get_sale(COLLECTION, TOKEN)


class TestTakerFee:

    def test_admin_updates_fee(self, market):
        response = market.update_taker_fee("admin", 3)
        assert market.get_taker_fee() == 3
        assert response.events[0].get("taker_fee") == "3"

    def test_non_admin_rejected(self, market):
        with pytest.raises(Unauthorized):
            market.update_taker_fee("seller", 3)
        assert market.get_taker_fee() == 5

    def test_fee_over_100_rejected(self, market):
        with pytest.raises(InvalidPercentage):
            market.update_taker_fee("admin", 101)

    def test_fee_checked_against_registered_royalties(self, market):
        market.register_collection("admin", COLLECTION, 90, "royalty")
        with pytest.raises(FeeConfigurationError):
            market.update_taker_fee("admin", 11)
        assert market.get_taker_fee() == 5
        market.update_taker_fee("admin", 10)
