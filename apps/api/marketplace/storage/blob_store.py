# marketplace/storage/blob_store.py
from __future__ import annotations

import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Blob:
    data: bytes
    content_type: str


class BlobStore(Protocol):
    """
    バイナリ保存の抽象（key -> bytes）。
    key は "images/xxx.jpg" のような "/" 区切りの相対パス。
    """

    def put(self, key: str, data: bytes, content_type: str) -> None: ...

    def get(self, key: str) -> Optional[Blob]: ...

    def delete(self, key: str) -> None:
        """存在しなくてもエラーにしない"""
        ...


def _safe_key(key: str) -> str:
    # ディレクトリトラバーサル防止
    parts = [p for p in key.replace("\\", "/").split("/") if p]
    if not parts or any(p in (".", "..") for p in parts):
        raise ValueError(f"Invalid blob key: {key!r}")
    return "/".join(parts)


class LocalBlobStore:
    """ファイルシステム実装（UPLOAD_DIR 配下）"""

    def __init__(self, root: str) -> None:
        self.root = os.path.abspath(root)

    def _path(self, key: str) -> str:
        return os.path.join(self.root, *_safe_key(key).split("/"))

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    def get(self, key: str) -> Optional[Blob]:
        path = self._path(key)
        if not os.path.isfile(path):
            return None
        with open(path, "rb") as f:
            data = f.read()
        content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        return Blob(data=data, content_type=content_type)

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


class StagedBlobs:
    """
    アップロード途中のblobを登録しておき、commit() されなければ
    with ブロックを抜ける時に削除する（DB書き込み失敗時の孤児ファイル防止）。

        with StagedBlobs(store) as staged:
            staged.put("images/a.jpg", data, "image/jpeg")
            db.commit()
            staged.commit()
    """

    def __init__(self, store: BlobStore) -> None:
        self.store = store
        self._keys: List[str] = []
        self._committed = False

    def __enter__(self) -> "StagedBlobs":
        return self

    def put(self, key: str, data: bytes, content_type: str) -> None:
        # 書き込み途中で失敗しても消せるよう先に登録
        self._keys.append(key)
        self.store.put(key, data, content_type)

    def commit(self) -> None:
        self._committed = True

    def rollback(self) -> None:
        for key in reversed(self._keys):
            try:
                self.store.delete(key)
            except Exception:
                # 元の例外を優先する（削除失敗はログのみ）
                logger.warning("Failed to clean up blob %s", key, exc_info=True)
        self._keys.clear()

    def __exit__(self, exc_type, exc, tb) -> bool:  # noqa: ANN001
        if not self._committed:
            self.rollback()
        return False
