"""Value objects shared by the mapping, coercion and backend layers.

Record schemas themselves are user dataclasses; this package holds the
field metadata helpers, format configuration and custom type handlers.
"""

from .error_record import ErrorRecord
from .field_descriptor import COLUMN_TAG, IGNORE, FieldDescriptor, column
from .format_config import (
    FloatFormat,
    FormatConfig,
    MoneyFormat,
    new_english_format_config,
    new_format_config,
    new_german_format_config,
)
from .processing_result import ConversionResult
from .type_handlers import CurrencyAmount, TypeHandler

__all__ = [
    # Schema metadata
    "COLUMN_TAG",
    "IGNORE",
    "FieldDescriptor",
    "column",
    # Formatting
    "FloatFormat",
    "MoneyFormat",
    "FormatConfig",
    "TypeHandler",
    "CurrencyAmount",
    "new_format_config",
    "new_english_format_config",
    "new_german_format_config",
    # Processing
    "ConversionResult",
    "ErrorRecord",
]
