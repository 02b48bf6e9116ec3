"""
Module: extractor.config

Purpose:
    Configuration dataclasses for the extraction pipeline. Provides
    immutable settings for page text acquisition, question parsing and
    batch coordination.

Key Classes:
    - OcrConfig: Render scale, language profile and preprocessing
    - BatchConfig: Chunk size, chunk time budget and page cap
    - ExtractionConfig: Main configuration for parsing and the pipeline

Dependencies:
    - dataclasses: For frozen dataclass support

Used By:
    - extractor.sources.page_text: Uses OcrConfig for the fallback path
    - extractor.batch.coordinator: Uses BatchConfig for chunking
    - extractor.pipeline: Uses ExtractionConfig for pipeline settings
"""

from dataclasses import dataclass, field

from quiz_toolkit.common.thresholds import (
    BATCH_THRESHOLDS,
    CHOICE_THRESHOLDS,
    PAGE_TEXT_THRESHOLDS,
    SEGMENTATION_THRESHOLDS,
)


@dataclass(frozen=True)
class OcrConfig:
    """
    Configuration for the recognition fallback.

    Attributes:
        render_scale: Upscale factor for page renders (default 2.0)
        language_profile: Engine language profile (default "jpn+eng")
        preprocess: Grayscale, autocontrast and binarize before recognition
        binarize_threshold: Grey level split used when preprocessing
        min_text_length: Text-layer yield below this falls back to recognition
    """
    render_scale: float = PAGE_TEXT_THRESHOLDS.default_render_scale
    language_profile: str = "jpn+eng"
    preprocess: bool = True
    binarize_threshold: int = PAGE_TEXT_THRESHOLDS.binarize_threshold
    min_text_length: int = PAGE_TEXT_THRESHOLDS.min_text_length

    def __post_init__(self) -> None:
        if self.render_scale <= 0:
            raise ValueError(f"render_scale must be positive: {self.render_scale}")
        if not self.language_profile:
            raise ValueError("language_profile cannot be empty")
        if not (0 <= self.binarize_threshold <= 255):
            raise ValueError(
                f"binarize_threshold must be 0-255: {self.binarize_threshold}"
            )
        if self.min_text_length < 0:
            raise ValueError(f"min_text_length cannot be negative: {self.min_text_length}")


@dataclass(frozen=True)
class BatchConfig:
    """
    Configuration for batch coordination.

    Attributes:
        chunk_size: Pages processed concurrently per chunk (default 5)
        chunk_timeout: Wall-clock budget per chunk in seconds (default 120)
        max_pages: Upper bound on pages processed per document (default 100)
        inter_chunk_pause: Seconds to sleep between chunks (default 0)
    """
    chunk_size: int = BATCH_THRESHOLDS.chunk_size
    chunk_timeout: float = BATCH_THRESHOLDS.chunk_timeout_seconds
    max_pages: int = BATCH_THRESHOLDS.max_pages
    inter_chunk_pause: float = 0.0

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1: {self.chunk_size}")
        if self.chunk_timeout <= 0:
            raise ValueError(f"chunk_timeout must be positive: {self.chunk_timeout}")
        if self.max_pages < 1:
            raise ValueError(f"max_pages must be >= 1: {self.max_pages}")
        if self.inter_chunk_pause < 0:
            raise ValueError(
                f"inter_chunk_pause cannot be negative: {self.inter_chunk_pause}"
            )


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Configuration for question extraction.

    Attributes:
        placeholder_choice: Marker used to pad missing choice slots
        max_question_number: Larger numbers are never question numbers
        min_numbered_body_length: Shorter "N. text" lines are choice lines
        min_paragraph_length: Paragraph fallback drops shorter blocks
        min_choices: Fewer labelled options do not count as choices
        ocr: Recognition fallback settings
        batch: Batch coordination settings
    """
    placeholder_choice: str = "—"
    max_question_number: int = SEGMENTATION_THRESHOLDS.max_question_number
    min_numbered_body_length: int = SEGMENTATION_THRESHOLDS.min_numbered_body_length
    min_paragraph_length: int = SEGMENTATION_THRESHOLDS.min_paragraph_length
    min_choices: int = CHOICE_THRESHOLDS.min_choices
    ocr: OcrConfig = field(default_factory=OcrConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)

    def __post_init__(self) -> None:
        if not self.placeholder_choice.strip():
            raise ValueError("placeholder_choice cannot be blank")
        if self.max_question_number < 1:
            raise ValueError(
                f"max_question_number must be >= 1: {self.max_question_number}"
            )
        if self.min_choices < 1:
            raise ValueError(f"min_choices must be >= 1: {self.min_choices}")
