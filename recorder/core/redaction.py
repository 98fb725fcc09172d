# recorder/core/redaction.py
from __future__ import annotations

import re

__all__ = ["redactText"]



# Captured SQL ends up in log lines, so user credentials must not leak through it.
_SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # Bearer or Authorization headers
    (re.compile(r"(?iu)(Bearer\s+)[A-Za-z0-9._\-]+"), r"\1***"),
    (re.compile(r"(?iu)(Authorization\s*[:=]\s*)[A-Za-z0-9._\-]+"), r"\1***"),

    # Password-like fields in JSON
    (re.compile(r'(?iu)("password"\s*:\s*")[^"]+(")'), r"\1***\2"),
    (re.compile(r'(?iu)("token"\s*:\s*")[^"]+(")'), r"\1***\2"),

    # WordPress password hashes ($P$..., $wp$2y$..., bcrypt) inside SQL literals
    (re.compile(r"(\$(?:P|H|wp\$2y|2y)\$)[./A-Za-z0-9$]+"), r"\1***"),
    # `user_pass` = '...' in UPDATE statements
    (re.compile(r"(?iu)(`?user_pass`?\s*=\s*')[^']*(')"), r"\1***\2"),
    # Application passwords and session tokens stored in usermeta
    (re.compile(r"(?iu)('session_tokens',\s*')[^']*(')"), r"\1***\2"),
    (re.compile(r"(?iu)('_application_passwords',\s*')[^']*(')"), r"\1***\2"),

    # Query parameter forms like token=abcdef
    (re.compile(r"(?iu)(token=)[^&\s]+"), r"\1***"),
]



def redactText(text: str) -> str:
    """Return sanitized text with sensitive substrings replaced by ***."""
    if not text:
        return text
    out = text
    for pattern, repl in _SENSITIVE_PATTERNS:
        try:
            out = pattern.sub(repl, out)
        except re.error:
            continue # Never crash logging on regex errors
    return out
