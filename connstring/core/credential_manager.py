"""Credential Manager - Encrypt and decrypt connection secrets

Keys are derived from an operator-supplied secret with a one-way hash and
used with AES. Tokens have the form ``<iv hex>:<ciphertext hex>``.
"""

import os
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from connstring.core.exceptions import DecryptionFailed, EncryptionFailed
from connstring.utils.constants import DEFAULT_CIPHER_ALGORITHM, DEFAULT_HASH_ALGORITHM

logger = logging.getLogger(__name__)

IV_LENGTH = 16
TOKEN_SEPARATOR = ":"

_HASH_ALGORITHMS = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha3-256": hashes.SHA3_256,
    "sha3-512": hashes.SHA3_512,
}


@dataclass(frozen=True)
class _CipherSpec:
    key_size: int
    mode: type
    padded: bool


_CIPHER_ALGORITHMS: Dict[str, _CipherSpec] = {
    "aes-128-cbc": _CipherSpec(16, modes.CBC, True),
    "aes-192-cbc": _CipherSpec(24, modes.CBC, True),
    "aes-256-cbc": _CipherSpec(32, modes.CBC, True),
    "aes-256-ctr": _CipherSpec(32, modes.CTR, False),
}


def derive_key(secret: str, hash_algorithm: str = DEFAULT_HASH_ALGORITHM) -> bytes:
    """
    Derive a fixed-length key from a secret.

    Args:
        secret: Operator-supplied secret
        hash_algorithm: Digest name (sha256, sha512, ...)

    Returns:
        Digest of the UTF-8 encoded secret

    Raises:
        ValueError: If secret is empty or the digest is unknown
    """
    if not secret:
        raise ValueError("Secret is required for key derivation")

    try:
        algorithm = _HASH_ALGORITHMS[hash_algorithm.lower()]
    except KeyError:
        raise ValueError(f"Unsupported hash algorithm: {hash_algorithm}") from None

    digest = hashes.Hash(algorithm())
    digest.update(secret.encode("utf-8"))
    return digest.finalize()


def _build_cipher(key: bytes, iv: bytes, cipher_algorithm: str) -> tuple:
    try:
        spec = _CIPHER_ALGORITHMS[cipher_algorithm.lower()]
    except KeyError:
        raise ValueError(f"Unsupported cipher algorithm: {cipher_algorithm}") from None

    if len(key) != spec.key_size:
        raise ValueError("Invalid key length")

    return Cipher(algorithms.AES(key), spec.mode(iv)), spec


def encrypt_token(plaintext: str, secret: str,
                  cipher_algorithm: str = DEFAULT_CIPHER_ALGORITHM,
                  hash_algorithm: str = DEFAULT_HASH_ALGORITHM) -> str:
    """
    Encrypt a string with a key derived from secret.

    Every call uses a fresh random IV, so the same input never produces
    the same token twice.

    Args:
        plaintext: Value to encrypt
        secret: Operator-supplied secret
        cipher_algorithm: Cipher name (default aes-256-cbc)
        hash_algorithm: Digest used for key derivation

    Returns:
        Token in format "<iv hex>:<ciphertext hex>"

    Raises:
        EncryptionFailed: On empty input or any cipher error
    """
    try:
        if not plaintext or not secret:
            raise ValueError("Text and secret are required for encryption")

        key = derive_key(secret, hash_algorithm)
        iv = os.urandom(IV_LENGTH)
        cipher, spec = _build_cipher(key, iv, cipher_algorithm)

        data = plaintext.encode("utf-8")
        if spec.padded:
            padder = padding.PKCS7(algorithms.AES.block_size).padder()
            data = padder.update(data) + padder.finalize()

        encryptor = cipher.encryptor()
        encrypted = encryptor.update(data) + encryptor.finalize()
        return iv.hex() + TOKEN_SEPARATOR + encrypted.hex()
    except Exception as e:
        raise EncryptionFailed(str(e)) from e


def decrypt_token(token: str, secret: str,
                  cipher_algorithm: str = DEFAULT_CIPHER_ALGORITHM,
                  hash_algorithm: str = DEFAULT_HASH_ALGORITHM) -> str:
    """
    Decrypt a token produced by encrypt_token.

    Args:
        token: "<iv hex>:<ciphertext hex>" token
        secret: Secret the token was encrypted with
        cipher_algorithm: Cipher name (default aes-256-cbc)
        hash_algorithm: Digest used for key derivation

    Returns:
        Decrypted plaintext

    Raises:
        DecryptionFailed: On empty input, a malformed token, a wrong
            secret or any cipher error
    """
    try:
        if not token or not secret:
            raise ValueError("Encrypted text and secret are required for decryption")

        iv_hex, _, encrypted_hex = token.partition(TOKEN_SEPARATOR)
        if not iv_hex or not encrypted_hex:
            raise ValueError("Invalid encrypted text format")

        key = derive_key(secret, hash_algorithm)
        cipher, spec = _build_cipher(key, bytes.fromhex(iv_hex), cipher_algorithm)

        decryptor = cipher.decryptor()
        data = decryptor.update(bytes.fromhex(encrypted_hex)) + decryptor.finalize()
        if spec.padded:
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            data = unpadder.update(data) + unpadder.finalize()

        return data.decode("utf-8")
    except Exception as e:
        raise DecryptionFailed(str(e)) from e


def looks_encrypted(value: Optional[str]) -> bool:
    """Return True if value carries the token separator"""
    return bool(value) and TOKEN_SEPARATOR in value


class CredentialManager:
    """Encrypts and decrypts credentials with one operator secret"""

    def __init__(self, secret: str,
                 hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
                 cipher_algorithm: str = DEFAULT_CIPHER_ALGORITHM):
        # Fail early on an empty secret or an unknown digest
        derive_key(secret, hash_algorithm)
        self._secret = secret
        self.hash_algorithm = hash_algorithm
        self.cipher_algorithm = cipher_algorithm

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        """
        Encrypt a plaintext string

        Args:
            plaintext: String to encrypt

        Returns:
            Token, or None if plaintext is empty
        """
        if not plaintext:
            return None

        try:
            token = encrypt_token(plaintext, self._secret,
                                  self.cipher_algorithm, self.hash_algorithm)
            logger.debug("Encrypted credential")
            return token
        except EncryptionFailed as e:
            logger.error(f"Failed to encrypt credential: {e}")
            raise

    def decrypt(self, token: Optional[str]) -> Optional[str]:
        """
        Decrypt a token to plaintext

        Args:
            token: Token produced by encrypt()

        Returns:
            Decrypted string, or None if token is None/empty
        """
        if not token:
            return None

        try:
            plaintext = decrypt_token(token, self._secret,
                                      self.cipher_algorithm, self.hash_algorithm)
            logger.debug("Decrypted credential")
            return plaintext
        except DecryptionFailed as e:
            logger.warning(f"Failed to decrypt credential: {e}")
            raise
