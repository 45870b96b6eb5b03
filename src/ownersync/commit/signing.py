"""Detached OpenPGP signatures over commit payloads."""

from __future__ import annotations

import logging
from typing import Optional

import pgpy
from pgpy.errors import PGPDecryptionError, PGPError

logger = logging.getLogger(__name__)


class SigningError(Exception):
    """Raised when a signature cannot be produced."""


class KeyParseError(SigningError):
    """Raised when the key material is not an armored private key."""


class DecryptError(SigningError):
    """Raised when the passphrase does not unlock the key or a sub-key."""


def load_private_key(armored_key: str) -> pgpy.PGPKey:
    """Parse an ASCII-armored private key block."""
    try:
        key, _ = pgpy.PGPKey.from_blob(armored_key)
    except (PGPError, ValueError, TypeError, IndexError) as exc:
        raise KeyParseError(f"invalid signing key: {exc}") from exc
    if key.is_public:
        raise KeyParseError("invalid signing key: expected a private key, got a public key")
    return key


def _sign(key: pgpy.PGPKey, data: bytes) -> str:
    try:
        signature = key.sign(data)
    except PGPError as exc:
        raise SigningError(f"failed to sign commit payload: {exc}") from exc
    return str(signature)


def sign_payload(payload: str, armored_key: str, passphrase: Optional[str] = None) -> str:
    """Return an ASCII-armored detached signature of *payload*.

    A protected key is unlocked with *passphrase* for the duration of the
    signing call, primary key and sub-keys alike.
    """
    key = load_private_key(armored_key)
    data = payload.encode("utf-8")

    if not key.is_protected:
        logger.debug("signing with unprotected key %s", key.fingerprint.keyid)
        return _sign(key, data)

    try:
        with key.unlock(passphrase or ""):
            logger.debug("signing with key %s", key.fingerprint.keyid)
            return _sign(key, data)
    except PGPDecryptionError as exc:
        raise DecryptError(f"failed to decrypt signing key: {exc}") from exc
