"""
RSA-SHA1 signing for OAuth 1.0 requests.

The consumer signs the base string with its RSA private key (PKCS#1 v1.5,
SHA-1) and the provider verifies with the consumer's public key, so no
shared secret is needed.
"""

import base64
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes, PublicKeyTypes

RSA_KEY_SIZES = (2048, 3072, 4096)


def generate_key_pair(key_size: int = 2048) -> tuple[bytes, bytes]:
    """
    Generate an RSA public/private key pair.

    Args:
        key_size: Key size (2048, 3072, 4096)

    Returns:
        Tuple of (private_key_pem, public_key_pem) as bytes

    Raises:
        ValueError: If an unsupported key size is specified
    """
    if key_size not in RSA_KEY_SIZES:
        raise ValueError(f"Invalid RSA key size: {key_size}. Use 2048, 3072, or 4096.")

    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_size,
    )

    private_key_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_key_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    return private_key_pem, public_key_pem


def _load_private_key(private_key_pem: bytes) -> PrivateKeyTypes:
    """Load a private key from PEM bytes."""
    return serialization.load_pem_private_key(private_key_pem, password=None)


def _load_public_key(public_key_pem: bytes) -> PublicKeyTypes:
    """Load a public key from PEM bytes."""
    return serialization.load_pem_public_key(public_key_pem)


def compute_rsa_sha1_signature(
    base_string: str,
    private_key_pem: bytes,
    encoding: str = "utf-8",
) -> str:
    """
    Sign a signature base string with an RSA private key.

    Args:
        base_string: The signature base string
        private_key_pem: PEM-encoded RSA private key
        encoding: Text encoding (default: utf-8)

    Returns:
        Base64-encoded signature

    Raises:
        ValueError: If the key is not an RSA private key
    """
    private_key = _load_private_key(private_key_pem)
    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise ValueError("Key type mismatch: expected RSA private key")

    signature = private_key.sign(
        base_string.encode(encoding),
        padding.PKCS1v15(),
        hashes.SHA1(),
    )
    return base64.b64encode(signature).decode("ascii")


def verify_rsa_sha1_signature(
    base_string: str,
    signature: str,
    public_key_pem: bytes,
    encoding: str = "utf-8",
) -> tuple[bool, Optional[str]]:
    """
    Verify an RSA-SHA1 signature with the consumer's public key.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        public_key = _load_public_key(public_key_pem)
    except ValueError as e:
        return False, f"Invalid public key: {e}"

    if not isinstance(public_key, rsa.RSAPublicKey):
        return False, "Key type mismatch: expected RSA public key"

    try:
        signature_bytes = base64.b64decode(signature, validate=True)
    except ValueError as e:
        return False, f"Invalid signature encoding: {e}"

    try:
        public_key.verify(
            signature_bytes,
            base_string.encode(encoding),
            padding.PKCS1v15(),
            hashes.SHA1(),
        )
    except InvalidSignature:
        return False, "Signature mismatch"

    return True, None
