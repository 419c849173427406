"""Strict JSON text parsing.

Python's json module accepts the non-standard literals NaN, Infinity and
-Infinity. Attached event data and opaque column payloads must be real
JSON, so they are rejected here.
"""

import json
from typing import Any


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON literal {name!r} is not allowed")


def extract_json(text: str) -> Any:
    """Parse JSON text, rejecting NaN and Infinity literals.

    Raises:
        ValueError: If text is not valid JSON (json.JSONDecodeError is a ValueError)
    """
    return json.loads(text, parse_constant=_reject_constant)
