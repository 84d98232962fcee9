"""
Helpers imported by sample_functions.

Lives next to it in the task root, so the import only works through the
task root fallback.
"""

import math
from typing import Dict, List


def describe(numbers: List[float]) -> Dict[str, float]:
    """Return summary statistics for a non-empty list of numbers."""
    count = len(numbers)
    total = sum(numbers)
    mean = total / count

    sorted_numbers = sorted(numbers)
    if count % 2 == 0:
        median = (sorted_numbers[count//2 - 1] + sorted_numbers[count//2]) / 2
    else:
        median = sorted_numbers[count//2]

    variance = sum((x - mean) ** 2 for x in numbers) / count

    return {
        "count": count,
        "sum": total,
        "mean": mean,
        "median": median,
        "min": min(numbers),
        "max": max(numbers),
        "std_dev": math.sqrt(variance),
        "variance": variance
    }
