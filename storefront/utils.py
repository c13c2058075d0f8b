from typing import Optional
import bleach


def clean_text(value: Optional[str]) -> Optional[str]:
    """Strip HTML tags and NUL bytes from user-entered text.

    Used for admin product fields and chat prompts. Other punctuation is
    kept as typed; the result is HTML-escaped.
    """
    if value is None:
        return None
    return bleach.clean(value.replace("\x00", ""), tags=set(), strip=True).strip()
