"""
Pagination marker codec.

A marker is the AES encryption of a single block holding a fixed magic
prefix and a signed 64-bit row key, rendered as URL-safe base64. Encoding
is deterministic, decoding is exact, and any string not produced with the
same secret is rejected.
"""

import base64
import binascii
import hashlib

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from pipeline_registry.exceptions.domain import InvalidMarkerError
from pipeline_registry.settings import settings

_MAGIC = b"pplmark\x00"
_BLOCK_SIZE = 16


class MarkerCodec:
    """Reversible transform between row keys and opaque marker strings."""

    def __init__(self, secret: str):
        # Derive a valid AES-256 key from arbitrary key material
        key = hashlib.sha256(secret.encode("utf-8")).digest()
        self._cipher = Cipher(algorithms.AES(key), modes.ECB())

    def encode(self, pk: int) -> str:
        """Encode a row key into a marker.

        Args:
            pk: Signed 64-bit row key

        Returns:
            Opaque marker string

        Raises:
            ValueError: If the key does not fit in 64 bits
        """
        try:
            block = _MAGIC + pk.to_bytes(8, "big", signed=True)
        except OverflowError as e:
            raise ValueError(f"Row key {pk} does not fit in 64 bits") from e
        encryptor = self._cipher.encryptor()
        encrypted = encryptor.update(block) + encryptor.finalize()
        return base64.urlsafe_b64encode(encrypted).decode("ascii")

    def decode(self, marker: str) -> int:
        """Decode a marker back into its row key.

        Args:
            marker: Marker produced by :meth:`encode`

        Returns:
            The encoded row key

        Raises:
            InvalidMarkerError: If the marker is malformed or foreign
        """
        try:
            encrypted = base64.b64decode(marker.encode("ascii"), altchars=b"-_", validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise InvalidMarkerError(marker) from e

        # Only the exact string encode() produces is accepted
        if len(encrypted) != _BLOCK_SIZE or base64.urlsafe_b64encode(encrypted) != marker.encode():
            raise InvalidMarkerError(marker)

        decryptor = self._cipher.decryptor()
        block = decryptor.update(encrypted) + decryptor.finalize()
        if not block.startswith(_MAGIC):
            raise InvalidMarkerError(marker)
        return int.from_bytes(block[len(_MAGIC) :], "big", signed=True)


def get_marker_codec() -> MarkerCodec:
    """Codec keyed with the configured marker secret."""
    return MarkerCodec(settings.marker_secret)
