"""Symmetric encryption of identity claims embedded in tokens."""

import json
import os

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .config import AuthConfig
from .entities import TokenPayload
from .exceptions import PayloadDecryptionError, PayloadFormatError
from .interfaces import PayloadCipherInterface

KEY_SIZE = 32
IV_SIZE = 16
TAG_SIZE = 32
BLOCK_SIZE_BITS = algorithms.AES.block_size

_HEX_DIGITS = frozenset("0123456789abcdef")


def derive_key(secret: str) -> bytes:
    """
    Turn the configured secret into a 256-bit key.

    Shorter secrets are right-padded with ASCII "0", longer ones truncated.
    """
    raw = secret.encode("utf-8")
    if len(raw) < KEY_SIZE:
        return raw.ljust(KEY_SIZE, b"0")
    return raw[:KEY_SIZE]


class PayloadCipher(PayloadCipherInterface):
    """
    AES-256-CBC payload cipher with an HMAC-SHA256 tag.

    Output is `<iv_hex>:<ciphertext_hex>` where the ciphertext half is the CBC
    ciphertext followed by a tag over `iv || ciphertext`. The tag is checked
    before any decryption, so a single altered byte is rejected instead of
    decrypting to different claims.
    """

    def __init__(self, config: AuthConfig) -> None:
        self._key = derive_key(config.cipher_secret)
        mac = hmac.HMAC(self._key, hashes.SHA256())
        mac.update(b"token-payload-mac")
        self._mac_key = mac.finalize()

    def encrypt(self, payload: TokenPayload) -> str:
        plaintext = json.dumps(payload.to_dict(), separators=(",", ":")).encode("utf-8")

        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(plaintext) + padder.finalize()

        iv = os.urandom(IV_SIZE)
        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return f"{iv.hex()}:{(ciphertext + self._tag(iv, ciphertext)).hex()}"

    def decrypt(self, data: str) -> TokenPayload:
        iv, blob = self._split(data)

        if len(blob) <= TAG_SIZE or (len(blob) - TAG_SIZE) % IV_SIZE:
            raise PayloadDecryptionError("Ciphertext has invalid length")
        ciphertext, tag = blob[:-TAG_SIZE], blob[-TAG_SIZE:]

        mac = hmac.HMAC(self._mac_key, hashes.SHA256())
        mac.update(iv + ciphertext)
        try:
            mac.verify(tag)
        except InvalidSignature as e:
            raise PayloadDecryptionError("Ciphertext authentication failed") from e

        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        try:
            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return TokenPayload.from_mapping(json.loads(plaintext.decode("utf-8")))
        except ValueError as e:
            # UnicodeDecodeError and JSONDecodeError are ValueErrors too
            raise PayloadDecryptionError(f"Decrypted payload rejected: {e}") from e

    def _tag(self, iv: bytes, ciphertext: bytes) -> bytes:
        mac = hmac.HMAC(self._mac_key, hashes.SHA256())
        mac.update(iv + ciphertext)
        return mac.finalize()

    @staticmethod
    def _split(data: str) -> tuple[bytes, bytes]:
        if not isinstance(data, str):
            raise PayloadFormatError()

        parts = data.split(":")
        if len(parts) != 2 or not all(parts):
            raise PayloadFormatError()

        iv_hex, blob_hex = parts
        if not set(iv_hex) <= _HEX_DIGITS or not set(blob_hex) <= _HEX_DIGITS:
            raise PayloadFormatError("Encrypted data is not hexadecimal")
        if len(iv_hex) % 2 or len(blob_hex) % 2:
            raise PayloadFormatError("Encrypted data has odd hex length")

        iv = bytes.fromhex(iv_hex)
        if len(iv) != IV_SIZE:
            raise PayloadFormatError("Initialization vector must be 16 bytes")
        return iv, bytes.fromhex(blob_hex)
