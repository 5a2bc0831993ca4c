"""Request signing for private Coinbase Pro endpoints.

Every private request carries an HMAC-SHA256 signature computed with the
base64-decoded API secret over ``timestamp + method + path + body``.
The signature must match the exchange byte-for-byte, so the helpers here
are pure functions of their inputs.
"""

import base64
import binascii
import hashlib
import hmac
import time
from dataclasses import dataclass, field

from src.coinbasepro.exceptions import EncodingError


@dataclass(frozen=True)
class Credentials:
    """API key, passphrase and base64 secret issued by Coinbase Pro.

    The key is scoped to a profile and carries view, transfer and/or trade
    permissions. All three values are required to sign a request.
    """
    key: str = ""
    passphrase: str = field(default="", repr=False)
    secret: str = field(default="", repr=False)

    def sign(self, message: str) -> str:
        return sign(self.secret, message)


def sign(secret: str, message: str) -> str:
    """Sign a pre-hash message.

    Args:
        secret: Base64 encoded API secret.
        message: ``timestamp + method + path + body``.

    Returns:
        Base64 encoded HMAC-SHA256 digest.

    Raises:
        EncodingError: If the secret is not valid base64.
    """
    try:
        key = base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"secret is not valid base64: {e}") from e
    digest = hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def build_message(timestamp: str, method: str, path: str, body: bytes = b"") -> str:
    return timestamp + method + path + body.decode("utf-8")


def timestamp() -> str:
    """Current Unix epoch second as an unpadded decimal string."""
    return str(int(time.time()))
