"""
Seed point generation.

Seeds are drawn uniformly in normalized [0, 1] coordinates so the same seed
string gives the same layout at any image resolution.
"""

import math

from voromosaic.config import ConfigError
from voromosaic.models import SeedPoint, SeedStrategy
from voromosaic.seeds.prng import SeededRandom
from voromosaic.tracer import get_tracer, trace


def round_half_up(value):
    """Round to the nearest integer, halves away from -inf (JavaScript Math.round)."""
    return int(math.floor(value + 0.5))


def compute_seed_count(image_width, image_height, density, strategy=SeedStrategy.ASPECT):
    """
    Compute the number of seeds from the normalized image area.

    With the "aspect" strategy the normalized area is width / height, so
    images of equal proportions get equal counts regardless of resolution.
    With "maxAspect" it is max(aspect, 1 / aspect), so portrait and landscape
    versions of the same proportions also agree.

    Args:
        image_width: image width in pixels
        image_height: image height in pixels
        density: seeds per normalized area unit, must be > 0
        strategy: SeedStrategy or its string value

    Returns:
        non-negative seed count
    """
    if image_width <= 0 or image_height <= 0:
        raise ConfigError(f"image dimensions must be positive, got {image_width}x{image_height}")
    if density <= 0:
        raise ConfigError(f"seed density must be > 0, got {density}")

    try:
        strategy = SeedStrategy(strategy)
    except ValueError:
        raise ConfigError(f"Invalid seed strategy: {strategy!r}") from None

    aspect = image_width / image_height
    if strategy == SeedStrategy.MAX_ASPECT:
        normalized_area = max(aspect, 1 / aspect)
    else:
        normalized_area = aspect

    return round_half_up(density * normalized_area)


@trace(label="generate_seeds")
def generate_seeds(seed_count, seed_value):
    """
    Generate seed points uniformly in [0, 1) x [0, 1).

    Pairs are drawn x first, then y, in order. No rejection or
    deduplication is done; coincident seeds are allowed.
    """
    if seed_count < 0:
        raise ConfigError(f"seed count must be >= 0, got {seed_count}")

    rng = SeededRandom(seed_value)
    seeds = []
    for _ in range(seed_count):
        x01 = rng.next()
        y01 = rng.next()
        seeds.append(SeedPoint(x01=x01, y01=y01))

    get_tracer().event(f"Generated {len(seeds)} seeds", seed_value=str(seed_value))
    return seeds


def seeds_to_pixels(seeds01, image_width, image_height):
    """Scale normalized seeds to pixel coordinates."""
    return [seed.to_pixel(image_width, image_height) for seed in seeds01]
