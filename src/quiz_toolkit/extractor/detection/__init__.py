"""
Module: extractor.detection

Purpose:
    Detection subpackage for locating question structure in document text.

Key Modules:
    - segmenter: Question block segmentation (問1, 1., 第1問, paragraphs)
    - choices: Choice extraction (1., a., ア., ①)

Used By:
    - extractor.pipeline: Orchestrates detection modules
"""

from .choices import ChoiceExtraction, extract_choices
from .segmenter import segment

__all__ = ["ChoiceExtraction", "extract_choices", "segment"]
