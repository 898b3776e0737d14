"""
nftmarket/core/crypto.py

The key that signs journal entries, and the check that reads them back.

An entry stores the signer's raw public key as hex next to its signature,
so anyone holding the journal file can run verify_entry_signature without
access to the private key. Signatures are base64url with the '=' padding
stripped to keep journal lines short.
"""

import base64
import binascii
from pathlib import Path

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
)

from nftmarket.core.exceptions import ConfigError

ED25519_KEY_BYTES = 32
ED25519_SIG_BYTES = 64


def _encode_signature(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _decode_signature(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def verify_entry_signature(message: bytes, signature: str, public_key_hex: str) -> bool:
    """
    True when signature is a valid Ed25519 signature of message under the
    hex public key recorded in a journal entry.

    A tampered or foreign journal is expected input for the verifier, so a
    malformed key or signature reads as "not valid" instead of raising.
    """
    if not isinstance(signature, str) or not isinstance(public_key_hex, str):
        return False
    try:
        key_bytes = bytes.fromhex(public_key_hex)
        raw = _decode_signature(signature)
    except (ValueError, binascii.Error):
        return False
    if len(key_bytes) != ED25519_KEY_BYTES or len(raw) != ED25519_SIG_BYTES:
        return False

    try:
        Ed25519PublicKey.from_public_bytes(key_bytes).verify(raw, message)
    except (InvalidSignature, ValueError):
        return False
    return True


class JournalSigner:
    """Signs journal entries with one Ed25519 key for the life of a deployment."""

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._key = private_key
        self.public_key_hex: str = (
            private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw).hex()
        )

    @classmethod
    def generate(cls) -> "JournalSigner":
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def open(cls, path: Path) -> "JournalSigner":
        """
        The deployment's signing key. A missing key file is created with a
        fresh key on first use, so `init` needs no separate key setup step.
        """
        path = Path(path)
        if not path.exists():
            signer = cls.generate()
            signer._write_pem(path)
            return signer

        try:
            key = load_pem_private_key(path.read_bytes(), password=None)
        except (OSError, ValueError, TypeError) as e:
            raise ConfigError(f"cannot read journal key: {e}", {"key_path": str(path)})
        if not isinstance(key, Ed25519PrivateKey):
            raise ConfigError("journal key is not an Ed25519 key", {"key_path": str(path)})
        return cls(key)

    def sign(self, message: bytes) -> str:
        return _encode_signature(self._key.sign(message))

    def _write_pem(self, path: Path) -> None:
        pem = self._key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(pem)
        except OSError as e:
            raise ConfigError(f"cannot write journal key: {e}", {"key_path": str(path)})

    def __repr__(self) -> str:
        return f"JournalSigner({self.public_key_hex[:16]}...)"
