"""
MTEXT/TEXT normalisation.

Strips DXF inline formatting (font directives, brace groups, paragraph
breaks and %% control codes) so the content can be shown and compared
as plain text.
"""
import re

# {\fArial|b0|i0|c0|p34;Hello} -> Hello
FONT_DIRECTIVE_RE = re.compile(r"\{\\f[^;]*;([^}]*)\}")
BRACE_GROUP_RE = re.compile(r"\{[^}]*\}")
PARAGRAPH_RE = re.compile(r"\\P")
WHITESPACE_RE = re.compile(r"\s+")

CONTROL_CODES = (
    ("%%C", "°"),
    ("%%D", "±"),
    ("%%U", ""),
    ("%%u", ""),
    ("%%O", ""),
    ("%%o", ""),
)
NUMERIC_CODE_RE = re.compile(r"%%\d+")


def _normalize_pass(text: str) -> str:
    text = FONT_DIRECTIVE_RE.sub(r"\1", text)
    text = BRACE_GROUP_RE.sub("", text)
    text = PARAGRAPH_RE.sub(" ", text)
    for code, replacement in CONTROL_CODES:
        text = text.replace(code, replacement)
    text = NUMERIC_CODE_RE.sub("", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def clean_dxf_text(raw) -> str:
    """
    Return the display text of a raw DXF text value.

    Non-string input gives an empty string. The rules run until the text
    is stable, because removing one code can expose another
    (``%%%%UC`` -> ``%%C``). Unbalanced braces are left in place.
    """
    if not isinstance(raw, str):
        return ""

    text = raw
    while True:
        cleaned = _normalize_pass(text)
        if cleaned == text:
            return cleaned
        text = cleaned


normalize = clean_dxf_text
