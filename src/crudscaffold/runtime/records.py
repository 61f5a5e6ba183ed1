"""Record building blocks shared by every generated record type.

Generated code expects each object ``X`` to have a record type ``X`` with
``id``, ``data`` and ``auto_fields`` fields and a default-constructible
``XData`` payload type.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PkSk(BaseModel):
    """Partition/sort key pair identifying one stored record."""

    model_config = ConfigDict(frozen=True)

    pk: str
    sk: str

    def __str__(self) -> str:
        return f"{self.pk}|{self.sk}"


class AutoFields(BaseModel):
    """Fields maintained by the storage layer rather than by callers."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    sort_key: Optional[str] = None  # position within an ordered collection
