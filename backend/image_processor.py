"""
Green Eye - Leaf image preparation before the plant health API call.
Decode with OpenCV, flag blur (Laplacian variance), downscale and re-encode as JPEG.
"""
from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

UPLOAD_MAX_DIMENSION = 1024
JPEG_QUALITY = 90
LAPLACIAN_BLUR_THRESHOLD = 100


@dataclass
class PreparedImage:
    jpeg_bytes: bytes
    is_blurry: bool
    sharpness: float
    original_resolution: Tuple[int, int]  # (w, h)
    upload_resolution: Tuple[int, int]


def decode_image(image_bytes: bytes) -> np.ndarray:
    """Decode to BGR. Raises ValueError when the bytes are not an image."""
    nparr = np.frombuffer(image_bytes, np.uint8)
    img = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None
    if img is None:
        raise ValueError("Invalid image: could not decode")
    return img


def _resize_max_dimension(img: np.ndarray, max_dim: int) -> Tuple[np.ndarray, Tuple[int, int]]:
    """Resize so the longest side is at most max_dim; preserve aspect ratio."""
    h, w = img.shape[:2]
    if max(h, w) <= max_dim:
        return img, (w, h)
    scale = max_dim / max(h, w)
    new_w = max(1, int(round(w * scale)))
    new_h = max(1, int(round(h * scale)))
    return cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_AREA), (new_w, new_h)


def laplacian_variance(img: np.ndarray) -> float:
    gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    return float(cv2.Laplacian(gray, cv2.CV_64F).var())


def prepare_leaf_image(image_bytes: bytes) -> PreparedImage:
    """
    Decode, measure sharpness on the full-resolution image, then downscale and
    re-encode for upload.
    """
    img = decode_image(image_bytes)
    h, w = img.shape[:2]
    sharpness = laplacian_variance(img)

    resized, upload_resolution = _resize_max_dimension(img, UPLOAD_MAX_DIMENSION)
    ok, buf = cv2.imencode(".jpg", resized, [cv2.IMWRITE_JPEG_QUALITY, JPEG_QUALITY])
    if not ok:
        raise ValueError("Invalid image: could not encode")

    return PreparedImage(
        jpeg_bytes=buf.tobytes(),
        is_blurry=sharpness < LAPLACIAN_BLUR_THRESHOLD,
        sharpness=round(sharpness, 2),
        original_resolution=(w, h),
        upload_resolution=upload_resolution,
    )
