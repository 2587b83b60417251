"""
Rendering of keys and values for the operation trace and mismatch dumps.

Printable ASCII is shown as-is, every other byte as two hex digits.
Fixed-length values are a single bit-field byte and are shown as 0xNN.
"""

_PRINTABLE = range(0x20, 0x7F)


def escape_bytes(data: bytes) -> str:
    return "".join(chr(ch) if ch in _PRINTABLE else f"{ch:02x}" for ch in data)


def format_item(data: bytes | None, fixed: bool = False) -> str:
    if data is None:
        return "<not found>"
    if fixed:
        return f"0x{data[0]:02x}" if data else "0x00"
    return escape_bytes(data)


def stream_item(tag: str, data: bytes | None, fixed: bool = False) -> str:
    """One line of a mismatch dump, e.g. ``\\toracle {0000000012abc}``."""
    return f"\t{tag} {{{format_item(data, fixed)}}}"


def format_target(key: bytes | int) -> str:
    if isinstance(key, int):
        return str(key)
    return f"{{{escape_bytes(key)}}}"


def format_operation(
    verb: str,
    key: bytes | int,
    value: bytes | None = None,
    fixed: bool = False,
) -> str:
    """
    A single operation trace line: verb, row or key, then the value.

    >>> format_operation("put", 12, b"\\x0c", fixed=True)
    'put       12 {0x0c}'
    """
    line = f"{verb:<10}{format_target(key)}"
    if value is not None:
        line += f" {{{format_item(value, fixed)}}}"
    return line
