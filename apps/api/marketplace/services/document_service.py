from __future__ import annotations

import logging
from typing import Optional

from marketplace.schemas.common import public_url
from marketplace.schemas.document import DocumentOut
from marketplace.services.uploads import ensure_size, ensure_type, unique_name
from marketplace.storage import Blob, BlobStore

logger = logging.getLogger(__name__)


def document_key(filename: str) -> str:
    return f"documents/{filename}"


class DocumentService:
    """車検証などのPDF置き場（DBには持たず、車両側は URL を registration_document に保存する）"""

    def __init__(self, store: BlobStore) -> None:
        self.store = store

    def upload_document(self, filename: Optional[str], content_type: Optional[str], content: bytes) -> DocumentOut:
        ensure_size(content)
        ensure_type(filename, content_type, ("pdf",), "Only PDF files are allowed")

        name = unique_name("document", ".pdf")
        self.store.put(document_key(name), content, "application/pdf")
        logger.info("Document uploaded: %s (%s bytes)", name, len(content))

        return DocumentOut(url=public_url(f"/api/documents/{name}"), filename=name)

    def get_document(self, filename: str) -> Optional[Blob]:
        try:
            blob = self.store.get(document_key(filename))
        except ValueError:
            return None
        if blob is None:
            return None
        return Blob(data=blob.data, content_type="application/pdf")

    def delete_document(self, filename: str) -> None:
        try:
            self.store.delete(document_key(filename))
        except ValueError:
            # 不正なファイル名は「存在しない」と同じ扱い
            return
        logger.info("Document deleted: %s", filename)
