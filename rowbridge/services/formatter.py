from __future__ import annotations

import enum
from typing import Any

from ..models.format_config import FormatConfig

"""Value -> display string conversion.

Dispatch order (first match wins):

1. ``None`` -> ``config.null_token``
2. custom handler registered for ``type(value)``
3. ``Enum`` member -> its value, formatted recursively
4. ``bool`` -> true/false token
5. ``str`` verbatim
6. ``float`` -> ``config.float_format``
7. ``int`` -> base 10
8. bytes-like -> UTF-8 text
9. ``str(value)``, which covers types defining their own ``__str__``
"""

__all__ = [
    "format_value",
    "format_row",
]

_BYTES_TYPES = (bytes, bytearray, memoryview)


def format_value(value: Any, config: FormatConfig) -> str:
    if value is None:
        return config.null_token

    handler = config.handler_for(type(value))
    if handler is not None:
        return handler.format(value, config)

    if isinstance(value, enum.Enum):
        return format_value(value.value, config)
    # bool は int のサブクラスなので int より先に判定
    if isinstance(value, bool):
        return config.true_token if value else config.false_token
    if isinstance(value, str):
        return str(value)
    if isinstance(value, float):
        return config.float_format.format(value)
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, _BYTES_TYPES):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def format_row(values: list[Any], config: FormatConfig) -> list[str]:
    return [format_value(v, config) for v in values]
