from __future__ import annotations

from marketplace.schemas.common import CamelModel


class DocumentOut(CamelModel):
    url: str
    filename: str
