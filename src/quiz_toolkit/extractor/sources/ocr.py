"""
Module: extractor.sources.ocr

Purpose:
    Optical recognition for pages without a usable text layer: Pillow
    preprocessing of rendered pages and a pytesseract-backed recognizer
    that rebuilds line structure from word-level output.

Key Functions:
    - preprocess_for_ocr(): Grayscale, autocontrast and binarize an image

Key Classes:
    - TesseractRecognizer: Recognizer implementation over pytesseract

Dependencies:
    - PIL (Pillow): Image decoding and preprocessing
    - pytesseract: Tesseract OCR engine bindings

Used By:
    - extractor.sources.page_text: Default preprocessor and recognizer
"""

from __future__ import annotations

import io
import logging
import re
from typing import Dict, List, Optional, Tuple

import pytesseract
from PIL import Image, ImageOps, UnidentifiedImageError

from quiz_toolkit.common.thresholds import PAGE_TEXT_THRESHOLDS

from ..errors import CollaboratorFailure

logger = logging.getLogger(__name__)

# Characters written without spaces between them
_CJK = re.compile(r"[\u3000-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uff00-\uffef\u2460-\u2473]")


def _open_image(image_bytes: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
        return image
    except (UnidentifiedImageError, OSError) as e:
        raise CollaboratorFailure(f"Cannot decode page image: {e}") from e


def preprocess_for_ocr(
    image_bytes: bytes,
    threshold: int = PAGE_TEXT_THRESHOLDS.binarize_threshold,
) -> bytes:
    """
    Prepare a rendered page for recognition.

    Converts to grayscale, stretches contrast and binarizes at
    ``threshold`` so faint scans and coloured backgrounds read as clean
    black-on-white text.

    Args:
        image_bytes: Encoded page image (PNG, JPEG, ...)
        threshold: Grey level above which pixels become white

    Returns:
        PNG-encoded binarized image

    Raises:
        CollaboratorFailure: If the image cannot be decoded
    """
    image = _open_image(image_bytes)
    gray = ImageOps.autocontrast(image.convert("L"))
    binary = gray.point(lambda p: 255 if p > threshold else 0)

    buffer = io.BytesIO()
    binary.save(buffer, format="PNG")
    return buffer.getvalue()


def _join_words(words: List[str]) -> str:
    line = ""
    for word in words:
        if line and not (_CJK.match(line[-1]) and _CJK.match(word[0])):
            line += " "
        line += word
    return line


def rebuild_text(data: Dict[str, list]) -> Tuple[str, float]:
    """
    Rebuild text and mean confidence from ``image_to_data`` output.

    Words are grouped by (block, paragraph, line); paragraphs are
    separated by a blank line. Word confidences of -1 (non-word rows)
    are ignored.

    Returns:
        (text, confidence in [0, 1])
    """
    lines: Dict[Tuple[int, int, int], List[str]] = {}
    confidences: List[float] = []
    for i, word in enumerate(data.get("text", [])):
        word = (word or "").strip()
        if not word:
            continue
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(word)
        conf = float(data["conf"][i])
        if conf >= 0:
            confidences.append(conf)

    parts: List[str] = []
    previous_paragraph: Optional[Tuple[int, int]] = None
    for key in sorted(lines):
        paragraph = key[:2]
        if previous_paragraph is not None and paragraph != previous_paragraph:
            parts.append("")
        parts.append(_join_words(lines[key]))
        previous_paragraph = paragraph

    if not confidences:
        return "\n".join(parts), 0.0
    mean = sum(confidences) / len(confidences) / PAGE_TEXT_THRESHOLDS.confidence_scale
    return "\n".join(parts), max(0.0, min(1.0, mean))


class TesseractRecognizer:
    """
    Recognizer backed by the Tesseract engine via pytesseract.

    Each instance serves one page; PageTextSource closes it afterwards.

    Example:
        >>> recognizer = TesseractRecognizer()
        >>> text, confidence = recognizer.recognize_text(png_bytes, "jpn+eng")
        >>> recognizer.close()
    """

    def __init__(self, tesseract_config: str = "--psm 6") -> None:
        self.tesseract_config = tesseract_config
        self._image: Optional[Image.Image] = None
        self.closed = False

    def recognize_text(self, image: bytes, language_profile: str) -> Tuple[str, float]:
        """
        Recognize text in an encoded image.

        Raises:
            CollaboratorFailure: If the engine is missing or fails
        """
        if self.closed:
            raise CollaboratorFailure("Recognizer has been closed")
        self._image = _open_image(image)
        try:
            data = pytesseract.image_to_data(
                self._image,
                lang=language_profile,
                config=self.tesseract_config,
                output_type=pytesseract.Output.DICT,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise CollaboratorFailure(f"Tesseract is not installed: {e}") from e
        except (pytesseract.TesseractError, RuntimeError) as e:
            raise CollaboratorFailure(f"Tesseract failed: {e}") from e
        return rebuild_text(data)

    def close(self) -> None:
        """Release the page image held by this recognizer."""
        if self._image is not None:
            self._image.close()
            self._image = None
        self.closed = True
