"""
Rules

- unsafe_html: `{@html}` insertions without a sanitizer call or suppression
"""

from svelte_unsafe_html.rules.unsafe_html import MESSAGE, RULE_ID, detect, is_sanitized, is_suppressed

__all__ = ["MESSAGE", "RULE_ID", "detect", "is_sanitized", "is_suppressed"]
