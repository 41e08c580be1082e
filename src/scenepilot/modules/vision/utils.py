"""
Vision utilities: image loading/decoding and crop helpers.
"""
from __future__ import annotations

import os
from typing import Optional, Union

import cv2  # type: ignore
import numpy as np


ImageLike = Union[str, bytes, np.ndarray]


def load_image(img: ImageLike) -> np.ndarray:
    """Load an image into a BGR numpy array.

    - str: treated as a file path and loaded via cv2.imread
    - bytes: decoded via cv2.imdecode
    - np.ndarray: returned as-is (assumed BGR or single-channel)
    """
    if isinstance(img, np.ndarray):
        return img
    if isinstance(img, (bytes, bytearray)):
        arr = np.frombuffer(img, dtype=np.uint8)
        mat = cv2.imdecode(arr, cv2.IMREAD_COLOR)
        if mat is None:
            raise ValueError("Failed to decode image bytes")
        return mat
    if isinstance(img, str):
        if not os.path.isfile(img):
            raise FileNotFoundError(f"Image file not found: {img}")
        mat = cv2.imread(img, cv2.IMREAD_COLOR)
        if mat is None:
            raise ValueError(f"Failed to load image from path: {img}")
        return mat
    raise TypeError(f"Unsupported image type: {type(img)}")


def is_empty(img: Optional[np.ndarray]) -> bool:
    return img is None or img.size == 0


def crop(img: np.ndarray, x: int, y: int, w: int, h: int) -> np.ndarray:
    """Crop (x, y, w, h) out of img.

    Raises ValueError when the rectangle is not fully inside the image.
    """
    ih, iw = img.shape[:2]
    if w <= 0 or h <= 0 or x < 0 or y < 0 or x + w > iw or y + h > ih:
        raise ValueError(f"Crop ({x},{y},{w},{h}) is out of bounds for image {iw}x{ih}")
    return img[y : y + h, x : x + w]


def hsv_histogram(img: np.ndarray) -> np.ndarray:
    """Normalized H-S histogram used for cheap region comparison."""
    hsv = cv2.cvtColor(img, cv2.COLOR_BGR2HSV)
    hist = cv2.calcHist([hsv], [0, 1], None, [50, 60], [0, 180, 0, 256])
    cv2.normalize(hist, hist, 0, 1, cv2.NORM_MINMAX)
    return hist


__all__ = [
    "ImageLike",
    "load_image",
    "is_empty",
    "crop",
    "hsv_histogram",
]
