"""SHA-256 helpers used to bind off-chain text to on-chain state."""
import hashlib


def sha256_bytes(text: str) -> bytes:
    """Return the 32-byte SHA-256 digest of ``text`` encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).digest()


def sha256_hex(text: str) -> str:
    """Return the hex-encoded SHA-256 digest of ``text`` encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
