"""
Module: naming

Purpose:
    Output filename construction: paper-size detection for the *size*
    token and template expansion for *size*, *YYMMDD* and *DDMMYY*.

Key Functions:
    - paper_code(): A-series detection with absolute tolerance
    - size_token_value(): Size text for an output geometry
    - expand_template(): Token substitution and underscore normalisation
"""

from .paper import PAPER_SIZES_MM, paper_code, size_token_value
from .template import (
    DDMMYY_TOKEN,
    DEFAULT_BASE_NAME,
    SIZE_TOKEN,
    YYMMDD_TOKEN,
    contains_date_pattern,
    contains_size_pattern,
    expand_template,
    page_suffix,
    suggest_template,
    tokenize_date_pattern,
    tokenize_size_pattern,
)

__all__ = [
    "PAPER_SIZES_MM",
    "paper_code",
    "size_token_value",
    "SIZE_TOKEN",
    "YYMMDD_TOKEN",
    "DDMMYY_TOKEN",
    "DEFAULT_BASE_NAME",
    "expand_template",
    "page_suffix",
    "contains_size_pattern",
    "contains_date_pattern",
    "tokenize_size_pattern",
    "tokenize_date_pattern",
    "suggest_template",
]
