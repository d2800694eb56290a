# marketplace/services/uploads.py
#
# アップロード共通（サイズ・種類チェック、保存名の採番）
from __future__ import annotations

import os
import secrets
import time
from typing import Iterable, Optional

from marketplace.core.errors import DomainRuleError

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB


def unique_name(prefix: str, ext: str) -> str:
    """<prefix>_<epoch-ms>_<hex><ext>"""
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(6)}{ext}"


def file_ext(filename: Optional[str]) -> str:
    _, ext = os.path.splitext((filename or "").lower())
    return ext


def mime_subtype(content_type: Optional[str]) -> str:
    # "image/jpeg; charset=..." -> "jpeg"
    main = (content_type or "").split(";", 1)[0].strip().lower()
    return main.split("/", 1)[1] if "/" in main else ""


def ensure_size(content: bytes, limit: int = MAX_UPLOAD_BYTES) -> None:
    if not content:
        raise DomainRuleError("File is empty", code="INVALID_FILE")
    if len(content) > limit:
        raise DomainRuleError(
            f"File size exceeds {limit // (1024 * 1024)}MB limit",
            code="INVALID_FILE",
        )


def ensure_type(
    filename: Optional[str],
    content_type: Optional[str],
    allowed: Iterable[str],
    message: str,
) -> None:
    """拡張子か MIME サブタイプのどちらかが allowed に含まれていればOK"""
    allowed = set(allowed)
    if file_ext(filename).lstrip(".") in allowed:
        return
    if mime_subtype(content_type) in allowed:
        return
    raise DomainRuleError(message, code="INVALID_FILE")
