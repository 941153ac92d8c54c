"""
Module: naming.template

Purpose:
    Filename templating. A base name may contain the tokens *size*,
    *YYMMDD* and *DDMMYY*; each token is separated from its neighbours by
    exactly one underscore after expansion. Also turns literal sizes and
    dates already present in a name back into tokens, so an imported
    filename like "flyer_210x297_250101" becomes a reusable template.

Key Functions:
    - expand_template(): Substitute tokens into a base name
    - page_suffix(): "_p<N>" suffix for multi-page raster exports
    - contains_size_pattern() / tokenize_size_pattern(): Literal sizes
    - contains_date_pattern() / tokenize_date_pattern(): Literal dates

Dependencies:
    - re (std)

Used By:
    - export.planner: Output filenames
    - cli: Default template from the source filename
"""

from __future__ import annotations

import re
from datetime import date as Date
from typing import Optional

SIZE_TOKEN = "*size*"
YYMMDD_TOKEN = "*YYMMDD*"
DDMMYY_TOKEN = "*DDMMYY*"

DEFAULT_BASE_NAME = "output"

_TOKENS = (SIZE_TOKEN, YYMMDD_TOKEN, DDMMYY_TOKEN)
_UNDERSCORES = re.compile(r"_+")

# Latin and Cyrillic look-alikes ("x"/"х", "A"/"А") are both accepted
_SIZE_LITERAL = r"\d+[xх]\d+"
_SIZE_PATTERN = re.compile(
    rf"(_{_SIZE_LITERAL}_)|(_{_SIZE_LITERAL}$)|(^{_SIZE_LITERAL}_)|(\b{_SIZE_LITERAL}\b)"
)
_PAPER_PATTERN = re.compile(r"(^|[_\-\s])([AА][0-5][hv]?)(?=$|[_\-\s])")
_DATE_PATTERN = re.compile(r"(?<!\d)\d{6}(?!\d)")


def expand_template(template: str, size_text: str, date: Date) -> str:
    """
    Expand filename tokens.

    Steps:
        1. Surround every token with underscores
        2. Collapse underscore runs
        3. Substitute size and date values
        4. Collapse underscore runs again and strip them from both ends

    Args:
        template: Base name, possibly containing tokens
        size_text: Value for *size* (e.g. "A4v" or "100x100")
        date: Date used for *YYMMDD* and *DDMMYY*

    Returns:
        Expanded name without extension; "output" if nothing remains

    Example:
        >>> expand_template("report_*size*_*YYMMDD*", "A4v", Date(2025, 3, 7))
        'report_A4v_250307'
        >>> expand_template("*size*flyer", "A5h", Date(2025, 3, 7))
        'A5h_flyer'
    """
    result = (template or "").strip()
    for token in _TOKENS:
        result = result.replace(token, f"_{token}_")
    result = _UNDERSCORES.sub("_", result)

    yy, mm, dd = f"{date.year % 100:02d}", f"{date.month:02d}", f"{date.day:02d}"
    result = result.replace(f"_{SIZE_TOKEN}_", f"_{size_text}_")
    result = result.replace(f"_{YYMMDD_TOKEN}_", f"_{yy}{mm}{dd}_")
    result = result.replace(f"_{DDMMYY_TOKEN}_", f"_{dd}{mm}{yy}_")

    result = _UNDERSCORES.sub("_", result).strip("_")
    return result or DEFAULT_BASE_NAME


def page_suffix(page_index: int) -> str:
    """
    Suffix for one page of a multi-page raster export.

    Args:
        page_index: 0-based page index

    Returns:
        "_p<N>" with N 1-based

    Example:
        >>> page_suffix(0)
        '_p1'
    """
    return f"_p{page_index + 1}"


def contains_size_pattern(text: str) -> bool:
    """True when text holds a literal "WxH" size or an A-series code."""
    if _SIZE_PATTERN.search(text):
        return True
    return bool(_PAPER_PATTERN.search(text))


def contains_date_pattern(text: str) -> bool:
    """True when text holds a 6-digit run that is not part of a longer number."""
    return bool(_DATE_PATTERN.search(text))


def tokenize_size_pattern(text: str, token: str = SIZE_TOKEN) -> str:
    """
    Replace literal sizes with the size token, keeping separators.

    Numeric "WxH" literals take precedence; A-series codes are only
    replaced when the name has no numeric size.

    Example:
        >>> tokenize_size_pattern("flyer_210x297_final")
        'flyer_*size*_final'
        >>> tokenize_size_pattern("poster-A3h")
        'poster-*size*'
    """
    replaced = re.sub(rf"(_){_SIZE_LITERAL}(_)", rf"\g<1>{_escape(token)}\g<2>", text)
    replaced = re.sub(rf"(_){_SIZE_LITERAL}$", rf"\g<1>{_escape(token)}", replaced)
    replaced = re.sub(rf"^{_SIZE_LITERAL}(_)", rf"{_escape(token)}\g<1>", replaced)
    replaced = re.sub(rf"\b{_SIZE_LITERAL}\b", _escape(token), replaced)
    if replaced != text:
        return replaced
    return _PAPER_PATTERN.sub(lambda m: f"{m.group(1)}{token}", text)


def tokenize_date_pattern(text: str, token: str = YYMMDD_TOKEN) -> str:
    """
    Replace the first 6-digit date with a date token.

    Example:
        >>> tokenize_date_pattern("flyer_250307", DDMMYY_TOKEN)
        'flyer_*DDMMYY*'
    """
    return _DATE_PATTERN.sub(lambda _m: token, text, count=1)


def suggest_template(file_name: str, date_token: Optional[str] = YYMMDD_TOKEN) -> str:
    """
    Turn an existing filename stem into a template.

    Args:
        file_name: Source filename (extension is dropped)
        date_token: Token for a literal date, or None to keep dates

    Returns:
        Template with literal sizes (and optionally dates) tokenized
    """
    stem = file_name.rsplit(".", 1)[0] if "." in file_name else file_name
    if contains_size_pattern(stem):
        stem = tokenize_size_pattern(stem)
    if date_token and contains_date_pattern(stem):
        stem = tokenize_date_pattern(stem, date_token)
    return stem or DEFAULT_BASE_NAME


def _escape(token: str) -> str:
    """Escape a token for use as an re.sub replacement string."""
    return token.replace("\\", r"\\")
