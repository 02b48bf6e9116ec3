"""Answer document parsing."""

from .answer_key import parse_answer_key

__all__ = ["parse_answer_key"]
