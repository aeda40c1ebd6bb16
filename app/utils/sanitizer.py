"""Text and rich-text sanitization for dish fields.

Free-text fields are entity-escaped so a renderer shows them literally.
Rich text is reduced to a small allow-list of inline tags.
"""

from __future__ import annotations

import nh3

# Applied in this order over the whole string; "&" is left untouched.
TEXT_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)

ALLOWED_HTML_TAGS = {"b", "i", "em", "strong", "p", "br"}


def sanitize_text(text: str) -> str:
    """Escape characters that could open markup in ``text``.

    Not tag-aware and does not truncate; callers enforce length limits.

    Examples:
        >>> sanitize_text("<a>'\\"/")
        '&lt;a&gt;&#x27;&quot;&#x2F;'
    """
    for char, entity in TEXT_REPLACEMENTS:
        text = text.replace(char, entity)
    return text


def sanitize_html(html: str) -> str:
    """Keep only simple inline formatting tags, with no attributes.

    Disallowed tags are removed (their text is kept, except for script and
    style whose content is dropped). Only meant for trusted rich-text
    rendering paths; dish names and descriptions go through sanitize_text.
    """
    if not html:
        return ""
    return nh3.clean(
        html,
        tags=ALLOWED_HTML_TAGS,
        attributes={"*": set()},
        link_rel=None,
    )
