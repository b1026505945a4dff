"""Crypto primitives for the event ledger.

Ed25519 (PyNaCl) for signatures, SHA3-512 for payload hashing.

Conventions shared with every other ledger implementation:

- The hash identifier is computed over the canonical serialization of the
  event payload (``EventData``) only.
- Signatures are made over the UTF-8 bytes of the *hex-encoded* hash string,
  not over the raw digest bytes.
- Private keys are 64 bytes: the 32-byte seed followed by the 32-byte public
  key.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import SigningKey, VerifyKey

if TYPE_CHECKING:
    from bu_agent.ledger.models import EventData

PUBLIC_KEY_SIZE = 32
PRIVATE_KEY_SIZE = 64
SIGNATURE_SIZE = 64
HASH_SIZE = 64

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LedgerError(Exception):
    """Base class for ledger errors."""


class KeyGenerationError(LedgerError):
    """The entropy source failed while generating a key pair."""


class SigningError(LedgerError):
    """An event could not be signed."""


class VerificationError(LedgerError):
    """An event failed signature verification and was rejected."""


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


def generate_keypair() -> tuple[bytes, bytes]:
    """Generate an Ed25519 key pair.

    Returns ``(public_key, private_key)`` as raw bytes (32 and 64 bytes).
    """
    try:
        sk = SigningKey.generate()
    except CryptoError as exc:
        msg = f"failed to generate key pair: {exc}"
        raise KeyGenerationError(msg) from exc
    public_key = bytes(sk.verify_key)
    return public_key, bytes(sk) + public_key


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------

_SHORT_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_UNICODE_ESCAPED = frozenset("<>&\u2028\u2029")
_REPLACEMENT_CHAR = "\ufffd"


def _quote(value: str) -> str:
    """JSON-quote a string using Go ``encoding/json`` escaping rules.

    Lone surrogates (which ``json.loads`` lets through from ``\\udXXX``
    escapes) become U+FFFD, as Go does for invalid UTF-16.
    """
    out = ['"']
    for ch in value:
        escaped = _SHORT_ESCAPES.get(ch)
        if escaped is not None:
            out.append(escaped)
        elif "\ud800" <= ch <= "\udfff":
            out.append(_REPLACEMENT_CHAR)
        elif ch < " " or ch in _UNICODE_ESCAPED:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def canonical_payload(data: EventData) -> bytes:
    """Serialize an event payload to its canonical byte form.

    Compact JSON with a fixed field order (``type``, ``description``,
    ``payload``, ``timestamp``) and payload keys sorted, so byte-identical
    payloads always produce byte-identical output.
    """
    entries = ",".join(f"{_quote(k)}:{_quote(data.payload[k])}" for k in sorted(data.payload))
    text = (
        f'{{"type":{_quote(data.type)},'
        f'"description":{_quote(data.description)},'
        f'"payload":{{{entries}}},'
        f'"timestamp":{_quote(data.timestamp)}}}'
    )
    return text.encode("utf-8")


def hash_payload(data: EventData) -> str:
    """Return the lowercase hex SHA3-512 digest of the canonical payload."""
    return hashlib.sha3_512(canonical_payload(data)).hexdigest()


# ---------------------------------------------------------------------------
# Sign / verify
# ---------------------------------------------------------------------------


def sign(hash_hex: str, private_key: bytes) -> bytes:
    """Sign the UTF-8 bytes of *hash_hex* with a 64-byte private key."""
    if len(private_key) != PRIVATE_KEY_SIZE:
        msg = f"invalid private key length {len(private_key)}, expected {PRIVATE_KEY_SIZE}"
        raise SigningError(msg)
    try:
        signed = SigningKey(private_key[:32]).sign(hash_hex.encode("utf-8"))
    except CryptoError as exc:
        raise SigningError(str(exc)) from exc
    return signed.signature


def verify(hash_hex: str, signature: bytes, public_key: bytes) -> bool:
    """Check *signature* over *hash_hex* against *public_key*.

    Returns ``False`` for malformed key or signature lengths as well as for a
    cryptographic mismatch.
    """
    if len(public_key) != PUBLIC_KEY_SIZE or len(signature) != SIGNATURE_SIZE:
        return False
    try:
        VerifyKey(public_key).verify(hash_hex.encode("utf-8"), signature)
    except BadSignatureError:
        return False
    return True
