"""FNV-1a 64-bit content hashing for block change detection"""

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
_MASK_64 = 0xFFFFFFFFFFFFFFFF


def fnv1a_64(content: str) -> int:
    """Return the 64-bit FNV-1a hash of content's UTF-8 bytes."""
    h = FNV_OFFSET_BASIS
    for byte in content.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & _MASK_64
    return h


def hex_digest(content_hash: int) -> str:
    """Lowercase hex form used on the wire (no zero padding)."""
    return format(content_hash, "x")
