# marketplace/services/image_processing.py
#
# Pillow での画像変換
# - 入力は bytes、出力は JPEG bytes（保存は呼び出し側の BlobStore）
# - 読めない画像は InvalidImageError
from __future__ import annotations

import io
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

MAIN_JPEG_QUALITY = 85
THUMBNAIL_SIZE: Tuple[int, int] = (300, 200)
THUMBNAIL_JPEG_QUALITY = 80
FEATURED_SIZE: Tuple[int, int] = (1200, 630)
FEATURED_JPEG_QUALITY = 85


class InvalidImageError(ValueError):
    pass


def open_image(content: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(content))
        img.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise InvalidImageError(f"Invalid image file: {e}") from e

    # EXIF の回転を反映してから RGB に揃える（JPEG は alpha を持てない）
    img = ImageOps.exif_transpose(img)
    return img.convert("RGB")


def _encode_jpeg(img: Image.Image, *, quality: int, progressive: bool = False) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality, progressive=progressive, optimize=True)
    return buf.getvalue()


def _cover(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    # アスペクト比を保ったまま中央基準で切り抜き
    return ImageOps.fit(img, size, method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))


def process_vehicle_image(content: bytes) -> Tuple[bytes, bytes]:
    """(本体JPEG, サムネイルJPEG) を返す"""
    img = open_image(content)
    main = _encode_jpeg(img, quality=MAIN_JPEG_QUALITY, progressive=True)
    thumb = _encode_jpeg(_cover(img, THUMBNAIL_SIZE), quality=THUMBNAIL_JPEG_QUALITY)
    return main, thumb


def process_featured_image(content: bytes) -> bytes:
    img = open_image(content)
    return _encode_jpeg(_cover(img, FEATURED_SIZE), quality=FEATURED_JPEG_QUALITY, progressive=True)
