import numpy as np
from typing import Optional

from bead.errors import EmptySampleSet, InvalidK
from bead.palette_tools import as_pixel_matrix, nearest_palette_indices

MAX_ITERATIONS = 20
CONVERGENCE_TOLERANCE = 1.0


class RandomSource:
    """
    Uniform random numbers for centroid seeding and empty-cluster re-seeding.

    Tests swap in any object with the same two methods to script the draws.
    """

    def __init__(self, seed: Optional[int] = None):
        self._rng = np.random.default_rng(seed)

    def next_uniform(self) -> float:
        """Float in [0, 1)."""
        return float(self._rng.random())

    def next_in_range(self, n: int) -> int:
        """Integer in [0, n)."""
        return int(self._rng.integers(n))


def _seed_centroids(samples: np.ndarray, k: int, rng) -> np.ndarray:
    # K-Means++: weights are the plain (not squared) distance to the nearest chosen centroid
    n = len(samples)
    centroids = [samples[rng.next_in_range(n)]]
    min_dists = np.linalg.norm(samples - centroids[0], axis=1)

    for _ in range(1, k):
        cumulative = np.cumsum(min_dists)
        target = rng.next_uniform() * cumulative[-1]
        next_idx = int(np.searchsorted(cumulative, target, side="left"))
        if next_idx >= n:  # float overshoot past the last bucket
            next_idx = 0
        centroids.append(samples[next_idx])
        min_dists = np.minimum(min_dists, np.linalg.norm(samples - samples[next_idx], axis=1))

    return np.array(centroids, dtype=np.int64)


def kmeans_pp_palette(
    samples,
    k: int,
    rng=None,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = CONVERGENCE_TOLERANCE,
) -> np.ndarray:
    """
    Reduce a set of RGB samples to at most k representative colors.

    Centroids are seeded with K-Means++ and refined with Lloyd iterations until
    no centroid moves more than `tolerance` or `max_iterations` rounds have run.
    The result is randomized; two runs over the same input may differ.

    Args:
        samples: Nx3 RGB samples (a flattened pixel matrix, row-major).
        k: Requested palette size.
        rng: Object providing next_uniform() and next_in_range(n). Defaults to an unseeded RandomSource.
        max_iterations: Cap on Lloyd rounds.
        tolerance: Largest per-centroid move (Euclidean RGB) that still counts as converged.

    Returns:
        np.ndarray: Kx3 uint8 palette in centroid index order. When k >= N the
        samples themselves are returned unchanged.

    Raises:
        InvalidK: If k < 1.
        EmptySampleSet: If there are no samples.
        ValueError: If a channel falls outside 0-255.
    """
    if k < 1:
        raise InvalidK(f"Palette size must be at least 1, got {k}.")

    samples_arr = np.asarray(samples, dtype=np.int64).reshape((-1, 3))
    n = len(samples_arr)
    if n == 0:
        raise EmptySampleSet("Cannot build a palette from zero samples.")
    if samples_arr.min() < 0 or samples_arr.max() > 255:
        raise ValueError("Color channels must be within 0-255.")

    if k >= n:
        return samples_arr.astype(np.uint8)

    if rng is None:
        rng = RandomSource()

    centroids = _seed_centroids(samples_arr, k, rng)

    for _ in range(max_iterations):
        labels = nearest_palette_indices(samples_arr, centroids)

        counts = np.bincount(labels, minlength=k)
        sums = np.zeros((k, 3), dtype=np.int64)
        np.add.at(sums, labels, samples_arr)

        new_centroids = np.empty_like(centroids)
        for idx in range(k):
            if counts[idx] == 0:
                new_centroids[idx] = samples_arr[rng.next_in_range(n)]
            else:
                # Round half up on each channel
                new_centroids[idx] = np.floor(sums[idx] / counts[idx] + 0.5)

        shifts = np.linalg.norm(new_centroids - centroids, axis=1)
        centroids = new_centroids
        if np.all(shifts <= tolerance):
            break

    return centroids.astype(np.uint8)


def quantize_pixels(pixels, k: int, rng=None) -> np.ndarray:
    """Flatten an HxWx3 pixel matrix row-major and build its k-color palette."""
    flat = as_pixel_matrix(pixels).reshape((-1, 3))
    return kmeans_pp_palette(flat, k, rng=rng)
