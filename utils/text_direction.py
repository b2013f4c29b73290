"""Right-to-left text detection for result cards."""

import re

# Hebrew, Arabic, Syriac, Thaana, RTL marks and Arabic presentation forms
_RTL_CHARS = re.compile(r"[\u0591-\u07FF\u200F\u202B\u202E\uFB1D-\uFDFD\uFE70-\uFEFC]")


def is_rtl_text(text: str | None) -> bool:
    return bool(_RTL_CHARS.search(text or ""))


def text_direction(*texts: str | None) -> str:
    """Return "rtl" if any of the given texts contains right-to-left characters."""
    return "rtl" if any(is_rtl_text(text) for text in texts) else "ltr"
