"""Zeroable container for passphrases kept alive by an unlocked key."""

import ctypes
import warnings
from typing import Self


def _secure_zero(buffer: bytearray) -> None:
    size = len(buffer)
    if not size:
        return
    try:
        ctypes.memset((ctypes.c_char * size).from_buffer(buffer), 0, size)
    except (TypeError, ValueError) as exc:
        warnings.warn(f"memset unavailable, zeroing byte by byte: {exc}", RuntimeWarning)
        buffer[:] = bytes(size)


class SecureBytes:
    """
    Passphrase bytes that are zeroed in place when cleared.

    An unlocked key holds one of these for as long as its key session keeps the
    key; dropping or clearing the session clears it. Once cleared the key can no
    longer be re-opened.
    """

    __slots__ = ("_data", "_cleared")

    def __init__(self, data: bytes | bytearray) -> None:
        self._data = bytearray(data)
        self._cleared = False

    def __del__(self) -> None:
        self.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        if self._cleared:
            return "SecureBytes(<cleared>)"
        return f"SecureBytes(<{len(self._data)} bytes>)"

    @property
    def is_cleared(self) -> bool:
        return self._cleared

    def clear(self) -> None:
        """Zero the buffer. Idempotent."""
        if not self._cleared:
            _secure_zero(self._data)
            self._cleared = True

    def decode(self, encoding: str = "utf-8") -> str:
        """
        Return the passphrase as text for a single library call.

        Raises:
            RuntimeError: If the bytes were cleared.
        """
        if self._cleared:
            raise RuntimeError("SecureBytes has been cleared")
        return self._data.decode(encoding)

    @classmethod
    def from_string(cls, text: str, encoding: str = "utf-8") -> Self:
        encoded = bytearray(text, encoding)
        try:
            return cls(encoded)
        finally:
            _secure_zero(encoded)
