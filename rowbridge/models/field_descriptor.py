from __future__ import annotations

from collections.abc import Mapping
from dataclasses import MISSING, dataclass, field
from typing import Any

"""Per-field column metadata for record dataclasses.

Record schemas are plain dataclasses. Column titles, the ignore marker and
embedding are declared statically on each field through ``column()``, which
stores them in ``dataclasses.field(metadata=...)`` under a tag namespace
(``"col"`` unless told otherwise)::

    @dataclass
    class Invoice:
        number: str = column("Invoice No.")
        internal_id: int = column(IGNORE, default=0)
        address: Address = column(embed=True, default_factory=Address)

Fields whose name starts with an underscore are not visible as columns.
"""

__all__ = [
    "COLUMN_TAG",
    "EMBED_KEY",
    "IGNORE",
    "FieldDescriptor",
    "column",
]

COLUMN_TAG = "col"
EMBED_KEY = "embed"
IGNORE = "-"


def column(
    title: str | None = None,
    *,
    embed: bool = False,
    tag: str = COLUMN_TAG,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    metadata: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field together with its column metadata.

    Args:
        title: Column title. ``IGNORE`` ("-") removes the column. Text after the
            first comma is extra metadata and not part of the title.
        embed: Splice the fields of this nested dataclass in place.
        tag: Metadata namespace the title is stored under.
        default / default_factory / **kwargs: Passed through to ``dataclasses.field``.
    """
    meta = dict(metadata or {})
    if title is not None:
        meta[tag] = title
    if embed:
        meta[EMBED_KEY] = True
    return field(default=default, default_factory=default_factory, metadata=meta, **kwargs)


@dataclass(frozen=True)
class FieldDescriptor:
    """One visible, flattened field of a record schema.

    Attributes:
        name: Attribute name on its declaring dataclass
        type: Declared (resolved) annotation, may be ``X | None``
        value_type: Annotation with the optional wrapper removed
        nullable: True when the annotation admits ``None``
        path: Attribute names from the root record down to this field
        metadata: ``dataclasses.field`` metadata of the declaring field
    """
    name: str
    type: Any
    value_type: Any
    nullable: bool
    path: tuple[str, ...]
    metadata: Mapping[str, Any]

    def declared_title(self, tag: str = COLUMN_TAG) -> str | None:
        """Return the title stored under ``tag``, cut at the first comma.

        Returns None when the field carries no (or an empty) annotation.
        """
        raw = self.metadata.get(tag)
        if not raw:
            return None
        title = str(raw).split(",", 1)[0]
        return title or None

    def get(self, record: Any) -> Any:
        """Read this field's live value from ``record`` following ``path``."""
        value = record
        for attr in self.path:
            if value is None:
                # 埋め込みレコード自体が None の場合
                return None
            value = getattr(value, attr)
        return value
