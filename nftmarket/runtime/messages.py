"""
Message documents → marketplace entry points.

Execute messages are single-key mappings named after the entry point:

    {"create_sale": {"contract_address": "...", "token_id": "1",
                     "price": {"denom": "u", "amount": "1000"}}}
    {"buy": {"contract_address": "...", "token_id": "1"}}
    {"update_ownership": {"transfer_ownership": {"new_owner": "..."}}}
    {"update_ownership": "accept_ownership"}

Query messages follow the same shape:

    {"get_sale": {"contract_address": "...", "token_id": "1"}}
    {"get_taker_fee": {}}

Offer messages and paginated queries are declared but not implemented
and raise UnsupportedOperation.
"""

from typing import Any, Callable, Dict, Sequence, Tuple

from nftmarket.core.exceptions import UnsupportedOperation, ValidationError
from nftmarket.core.models import Coin, Response
from nftmarket.core.ownership import OwnershipAction
from nftmarket.runtime.market import Marketplace


_UNSUPPORTED_EXECUTE = {
    "accept_collection_offer",
    "create_collection_offer",
    "remove_collection_offer",
}

_UNSUPPORTED_QUERY = {"get_sales", "get_collections"}


def _unpack(msg: Any) -> Tuple[str, Any]:
    if not isinstance(msg, dict) or len(msg) != 1:
        raise ValidationError("message must be a mapping with exactly one key")
    (name, body), = msg.items()
    return name, body


def _field(body: Any, name: str, required: bool = True) -> Any:
    if not isinstance(body, dict):
        raise ValidationError("message body must be a mapping")
    if required and name not in body:
        raise ValidationError(f"missing field '{name}'")
    return body.get(name)


def _update_ownership(market: Marketplace, sender: str, body: Any) -> Response:
    if isinstance(body, str):
        action_name, payload = body, {}
    else:
        action_name, payload = _unpack(body)
    try:
        action = OwnershipAction(action_name)
    except ValueError:
        raise ValidationError(f"unknown ownership action '{action_name}'")
    new_owner = None
    if action is OwnershipAction.TRANSFER_OWNERSHIP:
        new_owner = _field(payload, "new_owner")
    return market.update_ownership(sender, action, new_owner)


def _sale(method: str) -> Callable[[Marketplace, str, Any], Response]:
    def handler(market: Marketplace, sender: str, body: Any) -> Response:
        return getattr(market, method)(
            sender,
            _field(body, "contract_address"),
            _field(body, "token_id"),
            Coin.from_dict(_field(body, "price")),
        )
    return handler


_EXECUTE: Dict[str, Callable[[Marketplace, str, Any], Response]] = {
    "register_collection": lambda m, s, b: m.register_collection(
        s,
        _field(b, "contract_address"),
        _field(b, "royalty_percentage", required=False),
        _field(b, "royalty_payment_address", required=False),
    ),
    "update_collection": lambda m, s, b: m.update_collection(
        s,
        _field(b, "contract_address"),
        _field(b, "royalty_percentage", required=False),
        _field(b, "royalty_payment_address", required=False),
        _field(b, "is_paused"),
    ),
    "admin_remove_sales": lambda m, s, b: m.admin_remove_sale(
        s, _field(b, "contract_address"), _field(b, "token_id"),
    ),
    "update_taker_fee": lambda m, s, b: m.update_taker_fee(s, _field(b, "taker_fee")),
    "create_sale": _sale("create_sale"),
    "update_sale": _sale("update_sale"),
    "remove_sale": lambda m, s, b: m.remove_sale(
        s, _field(b, "contract_address"), _field(b, "token_id"),
    ),
    "update_ownership": _update_ownership,
}


def execute(
    market: Marketplace,
    sender: str,
    msg: Dict[str, Any],
    funds: Sequence[Coin] = (),
) -> Response:
    """Dispatch an execute message. Only buy accepts attached funds."""
    name, body = _unpack(msg)
    if name in _UNSUPPORTED_EXECUTE:
        raise UnsupportedOperation(f"'{name}' is not implemented")
    if name == "buy":
        return market.buy(
            sender, _field(body, "contract_address"), _field(body, "token_id"), funds,
        )
    handler = _EXECUTE.get(name)
    if handler is None:
        raise ValidationError(f"unknown execute message '{name}'")
    if funds:
        raise ValidationError(f"'{name}' does not accept funds")
    return handler(market, sender, body)


def query(market: Marketplace, msg: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch a query message and return a JSON-ready dict."""
    name, body = _unpack(msg)
    if name in _UNSUPPORTED_QUERY:
        raise UnsupportedOperation(f"'{name}' is not implemented")
    if name == "get_sale":
        return market.get_sale(
            _field(body, "contract_address"), _field(body, "token_id")
        ).to_dict()
    if name == "get_collection":
        return market.get_collection(_field(body, "contract_address")).to_dict()
    if name == "get_taker_fee":
        return {"taker_fee": market.get_taker_fee()}
    if name == "get_ownership":
        return market.queries.get_ownership().to_dict()
    raise ValidationError(f"unknown query message '{name}'")
