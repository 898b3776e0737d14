"""
tests/test_config.py

YAML configuration loading and marketplace construction.
"""

from pathlib import Path

import pytest
import yaml

from nftmarket.core.exceptions import ConfigError, LedgerError
from nftmarket.runtime.config import MarketConfig


BASE = {
    "admin": "admin",
    "taker_fee": 5,
    "native_denom": "u",
    "marketplace_address": "market",
    "registry": {"nfts": {"1": {"owner": "seller", "approvals": ["market"]}}},
}


def write_config(tmp_path, data) -> Path:
    path = tmp_path / "market.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoading:

    def test_from_yaml(self, tmp_path):
        cfg = MarketConfig.from_yaml(write_config(tmp_path, BASE))
        assert cfg.admin == "admin"
        assert cfg.taker_fee == 5
        assert cfg.taker_address is None

    def test_relative_paths_resolve_against_file(self, tmp_path):
        cfg = MarketConfig.from_yaml(
            write_config(tmp_path, dict(BASE, state_path="data/state.json"))
        )
        assert cfg.state_path == tmp_path / "data" / "state.json"
        assert cfg.journal_path == tmp_path / "journal.jsonl"

    def test_missing_keys(self, tmp_path):
        data = dict(BASE)
        del data["native_denom"]
        with pytest.raises(ConfigError, match="native_denom"):
            MarketConfig.from_yaml(write_config(tmp_path, data))

    def test_non_mapping_document(self, tmp_path):
        with pytest.raises(ConfigError):
            MarketConfig.from_yaml(write_config(tmp_path, ["admin"]))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "market.yaml"
        path.write_text("admin: [unclosed")
        with pytest.raises(ConfigError):
            MarketConfig.from_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            MarketConfig.from_yaml(tmp_path / "absent.yaml")


class TestBuild:

    def test_instantiate_and_reopen(self, tmp_path):
        cfg = MarketConfig.from_yaml(write_config(tmp_path, BASE))
        cfg.instantiate(cfg.build())

        assert cfg.key_path.exists()
        assert cfg.journal_path.exists()

        reopened = cfg.build()
        assert reopened.get_taker_fee() == 5
        assert reopened.queries.get_taker_address() == "admin"
        assert reopened.registry.owner_of("nfts", "1") == "seller"

    def test_second_instantiate_rejected(self, tmp_path):
        cfg = MarketConfig.from_yaml(write_config(tmp_path, BASE))
        cfg.instantiate(cfg.build())
        with pytest.raises(LedgerError):
            cfg.instantiate(cfg.build())

    def test_bad_registry_section(self, tmp_path):
        data = dict(BASE, registry={"nfts": {"1": {"approvals": []}}})
        cfg = MarketConfig.from_yaml(write_config(tmp_path, data))
        with pytest.raises(ConfigError):
            cfg.build()

    def test_reopen_signs_with_the_same_key(self, tmp_path):
        cfg = MarketConfig.from_yaml(write_config(tmp_path, BASE))
        first = cfg.build().journal.signer.public_key_hex
        assert cfg.build().journal.signer.public_key_hex == first

    def test_unreadable_key_file(self, tmp_path):
        cfg = MarketConfig.from_yaml(write_config(tmp_path, BASE))
        cfg.key_path.parent.mkdir(parents=True, exist_ok=True)
        cfg.key_path.write_text("not a pem key")
        with pytest.raises(ConfigError):
            cfg.build()
