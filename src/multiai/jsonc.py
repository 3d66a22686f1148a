"""JSON with comments.

Strips ``//`` and ``/* */`` comments and trailing commas, then hands the
text to :mod:`json`. String literals are left untouched.
"""

import json
import re

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def strip_comments(text: str) -> str:
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise ValueError("unterminated block comment")
            # keep line numbers stable for json error messages
            out.append("\n" * text.count("\n", i, end))
            i = end + 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _drop_trailing_commas(text: str) -> str:
    out: list[str] = []
    last = 0
    in_string = False
    i = 0
    # only rewrite segments outside of string literals
    while i < len(text):
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                out.append(text[last:i + 1])
                last = i + 1
                in_string = False
        elif ch == '"':
            out.append(_TRAILING_COMMA.sub(r"\1", text[last:i]))
            last = i
            in_string = True
        i += 1
    if in_string:
        out.append(text[last:])
    else:
        out.append(_TRAILING_COMMA.sub(r"\1", text[last:]))
    return "".join(out)


def loads(text: str):
    """Parse a JSONC document.

    Raises:
        ValueError: on malformed input (``json.JSONDecodeError`` is a subclass)
    """
    return json.loads(_drop_trailing_commas(strip_comments(text)))
