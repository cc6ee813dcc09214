"""Small byte helpers shared by the attesters."""


def pad(data: bytes, size: int) -> bytes:
    """Return ``data`` cut or zero-filled to exactly ``size`` bytes."""
    if size < 0:
        raise ValueError("size must not be negative")
    chunk = bytes(data[:size])
    return chunk + bytes(size - len(chunk))