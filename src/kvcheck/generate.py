"""
Deterministic key and value synthesis.

Every key and value is a pure function of the row number and the run
configuration, so any row can be regenerated at any time for comparison
without remembering what was written.
"""

import zlib

from .config import RunConfig, SchemaVariant

DEFAULT_ALPHABET = b"abcdefghijklmnopqrstuvwxyz"
REPEAT_PREFIX = b"DUPLICATEV"


def _spread(row: int, salt: bytes) -> int:
    """Stable pseudo-random 32-bit value for a row."""
    return zlib.crc32(b"%s:%d" % (salt, row))


class KeyValueGenerator:
    """
    Key/value encoder for one schema variant.

    ROW keys are the row number zero-padded to ten digits followed by
    filler, so byte order equals row order. Values carry the same prefix
    followed by filler of a length derived from the row, except for the
    repeat-data rows, which all share one value.
    """

    def __init__(
        self,
        variant: SchemaVariant,
        key_min: int = 10,
        key_max: int = 32,
        value_min: int = 20,
        value_max: int = 64,
        bitcnt: int = 8,
        repeat_data_pct: int = 0,
        alphabet: bytes = DEFAULT_ALPHABET,
    ):
        if not alphabet:
            raise ValueError("alphabet cannot be empty")

        self.variant = variant
        self.key_min = key_min
        self.key_max = key_max
        self.value_min = value_min
        self.value_max = value_max
        self.bitmask = (1 << bitcnt) - 1
        self.repeat_data_pct = repeat_data_pct
        self.alphabet = alphabet

        # Filler is sliced out of one buffer starting at a row-dependent offset
        longest = max(key_max, value_max)
        self._filler = alphabet * (longest // len(alphabet) + 2)
        self._repeat_value = REPEAT_PREFIX + self._filler[: max(value_min - len(REPEAT_PREFIX), 0)]

    @classmethod
    def from_config(cls, config: RunConfig) -> "KeyValueGenerator":
        return cls(
            variant=config.variant,
            key_min=config.key_min,
            key_max=config.key_max,
            value_min=config.value_min,
            value_max=config.value_max,
            bitcnt=config.bitcnt,
            repeat_data_pct=config.repeat_data_pct,
        )

    def _fill(self, row: int, prefix: bytes, length: int) -> bytes:
        offset = row % len(self.alphabet)
        return prefix + self._filler[offset: offset + length - len(prefix)]

    def row_key(self, row: int) -> bytes:
        """The generated byte-string key for ``row``, regardless of variant."""
        span = self.key_max - self.key_min + 1
        length = self.key_min + _spread(row, b"key") % span
        return self._fill(row, b"%010d" % row, length)

    def generate_key(self, row: int, is_append: bool = False) -> bytes | int:
        """
        The key the stores are addressed by for ``row``.

        Row-store keys are generated bytes; column stores are keyed by
        the row number itself. ``is_append`` marks keys created by an
        insert and does not change the bytes.
        """
        if self.variant.is_column:
            return row
        return self.row_key(row)

    def generate_value(self, row: int) -> bytes:
        if self.variant is SchemaVariant.FIX:
            return bytes([row & self.bitmask])

        if self.repeat_data_pct and _spread(row, b"repeat") % 100 < self.repeat_data_pct:
            return self._repeat_value

        span = self.value_max - self.value_min + 1
        length = self.value_min + _spread(row, b"value") % span
        return self._fill(row, b"%010d" % row, length)
