from __future__ import annotations

import math


def round12(x: float) -> float:
    """Round to 12 decimals; non-finite values pass through unchanged."""
    x = float(x)
    if not math.isfinite(x):
        return x
    return round(x, 12)
