"""Random partition of the observations into two halves."""

import logging
from typing import Tuple

import numpy as np

from .exceptions import InsufficientSamples
from .utils import RandomState, as_generator

logger = logging.getLogger(__name__)

MIN_SAMPLES = 4


def split_indices(
    n: int,
    random_state: RandomState = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split ``range(n)`` uniformly at random into two disjoint halves.

    Parameters
    ----------
    n : int
        Number of observations.
    random_state : int, SeedSequence, Generator or None
        Seed of this draw. Separate calls with separate seeds are
        independent.

    Returns
    -------
    I1 : np.ndarray of shape (n // 2,)
        Sorted row indices of the first half.
    I2 : np.ndarray of shape (n - n // 2,)
        Sorted row indices of the second half.

    Raises
    ------
    InsufficientSamples
        If ``n < 4``.
    """
    if n < MIN_SAMPLES:
        raise InsufficientSamples(
            f"Need at least {MIN_SAMPLES} observations to split the data, got n={n}"
        )
    rng = as_generator(random_state)
    perm = rng.permutation(n)
    half = n // 2
    I1 = np.sort(perm[:half])
    I2 = np.sort(perm[half:])
    logger.debug("Split %d observations into halves of size %d and %d", n, len(I1), len(I2))
    return I1, I2
