"""
Per-layer similarity thresholds for the expansion search.

Shallow hops cast a wide net; each deeper hop must clear a stricter
threshold so the neighborhood does not drift off topic.
"""

from ..errors import ConfigError

# Hard ceiling for any layer threshold
MAX_THRESHOLD = 0.95

# Smallest gap below the ceiling still worth a final 0.95 layer
MIN_FINAL_GAP = 0.03

# Enough digits to drop float noise without moving any configured step
PRECISION = 10

# (upper bound of band, increment) - checked in order
INCREMENT_BANDS = (
    (0.65, 0.10),
    (0.75, 0.07),
    (0.85, 0.05),
)
DEFAULT_INCREMENT = 0.03


def threshold_increment(current: float) -> float:
    """Step to the next layer's threshold; smaller as headroom shrinks."""
    for upper, increment in INCREMENT_BANDS:
        if current < upper:
            return increment
    return DEFAULT_INCREMENT


def generate_thresholds(first_threshold: float, max_depth: int) -> list[float]:
    """
    Build the strictly increasing threshold sequence for each layer.

    Args:
        first_threshold: Threshold for layer 1, in [0, 0.95]
        max_depth: Maximum number of layers

    Returns:
        At most max_depth thresholds, the first equal to first_threshold
        and none above 0.95.
    """
    if not 0.0 <= first_threshold <= MAX_THRESHOLD:
        raise ConfigError(
            f"first_threshold must be between 0.0 and {MAX_THRESHOLD}, got {first_threshold}"
        )
    if max_depth < 1:
        raise ConfigError(f"max_depth must be at least 1, got {max_depth}")

    thresholds = [first_threshold]
    current = first_threshold

    while len(thresholds) < max_depth and current < MAX_THRESHOLD:
        # Rounded so bands compare against 0.77, not 0.7700000000000001
        next_threshold = round(current + threshold_increment(current), PRECISION)

        if next_threshold > MAX_THRESHOLD:
            if round(MAX_THRESHOLD - current, PRECISION) >= MIN_FINAL_GAP:
                thresholds.append(MAX_THRESHOLD)
            break

        thresholds.append(next_threshold)
        current = next_threshold

    return thresholds
