"""
Rounding Utilities

Half-up rounding shared by the normalizer and the aggregator. Python's round()
rounds halves to even, while dependency shares are historically computed with
half-up rounding (2.5 -> 3).

Usage:
    from teamgraph.utils.rounding import round_half_up

    share = round_half_up(5 / 2)  # 3
"""

import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves rounding towards +infinity.

    Args:
        value: Finite number

    Returns:
        Rounded integer

    Example:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(0.49)
        0
        >>> round_half_up(-2.5)
        -2
    """
    return math.floor(value + 0.5)
