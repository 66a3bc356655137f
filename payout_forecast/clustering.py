"""
k-means style clustering of policies in (mean inter-payout gap, mean payout) space.

Steps per iteration:
1) assign every policy to the nearest current centroid (ties keep the lowest id)
2) recompute each centroid as the mean of its members, dropping empty clusters
3) sum the rounded distances between *every* old and *every* new centroid

The loop continues while that all-pairs sum is >= epsilon. The sum is a
scalar "centroids stopped moving" signal, not a matched-pair delta: with
two or more distinct clusters it stays above zero, so the loop is also
bounded by ``config.MAX_CLUSTER_ITERATIONS``.

Assignments are kept as ``policy_id -> centroid id`` with a separate
``centroid id -> Centroid`` table, so clusters whose centroids happen to
compare equal never alias each other.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from . import config
from .errors import ClusteringError
from .schemas import Centroid, PayoutSummary

logger = logging.getLogger(__name__)


@dataclass
class ClusteringResult:
    centroids: dict[int, Centroid]   # table the final assignment refers to
    assignment: dict[int, int]       # policy_id -> centroid id
    iterations: int
    converged: bool

    @property
    def n_clusters(self) -> int:
        return len(self.centroids)

    def members(self, centroid_id: int) -> list[int]:
        return [pid for pid, cid in self.assignment.items() if cid == centroid_id]


# ---------------- Steps ---------------- #

def seed_centroids(
    summaries: Sequence[PayoutSummary],
    k: int,
    rng: np.random.Generator,
) -> dict[int, Centroid]:
    """Self-centroids of k policies drawn with replacement, duplicates removed."""
    if not summaries:
        raise ClusteringError("cannot cluster an empty set of payout summaries")
    if k < 1:
        raise ClusteringError(f"cluster count must be >= 1, got {k}")

    seeds: list[Centroid] = []
    for idx in rng.integers(0, len(summaries), size=k):
        c = summaries[int(idx)].self_centroid
        if c not in seeds:
            seeds.append(c)
    return dict(enumerate(seeds))


def assign_clusters(
    points: dict[int, Centroid],
    centroids: dict[int, Centroid],
) -> dict[int, int]:
    """Map every policy point to the id of its nearest centroid."""
    assignment: dict[int, int] = {}
    for policy_id, point in points.items():
        best_id, best_d = None, None
        for cid, c in centroids.items():
            d = c.distance_to(point)
            if best_id is None or d < best_d:
                best_id, best_d = cid, d
        assignment[policy_id] = best_id
    return assignment


def update_centroids(
    points: dict[int, Centroid],
    assignment: dict[int, int],
    centroids: dict[int, Centroid],
) -> dict[int, Centroid]:
    """Member means per cluster; clusters without members are dropped."""
    updated: list[Centroid] = []
    for cid in centroids:
        members = [points[pid] for pid, a in assignment.items() if a == cid]
        if not members:
            continue
        updated.append(
            Centroid(
                float(np.mean([p.x for p in members])),
                float(np.mean([p.y for p in members])),
            )
        )
    return dict(enumerate(updated))


def convergence_delta(old: Iterable[Centroid], new: Iterable[Centroid]) -> float:
    """Sum of rounded distances over all (old, new) pairs; NaN distances add 0."""
    new = list(new)
    total = 0.0
    for o in old:
        for p in new:
            d = o.distance_to(p)
            if not math.isnan(d):
                total += d
    return total


# ---------------- Driver ---------------- #

def compute_clusters(
    summaries: Sequence[PayoutSummary],
    k: Optional[int] = None,
    epsilon: Optional[float] = None,
    random_state: Optional[int] = None,
    max_iterations: Optional[int] = None,
) -> ClusteringResult:
    """Cluster the summaries and set each summary's ``centroid`` to its cluster centroid."""
    k = k if k is not None else config.DEFAULT_N_CLUSTERS
    epsilon = epsilon if epsilon is not None else config.DEFAULT_EPSILON
    seed = random_state if random_state is not None else config.SEED_CLUSTERING
    max_iterations = (
        max_iterations if max_iterations is not None else config.MAX_CLUSTER_ITERATIONS
    )
    if epsilon <= 0:
        raise ClusteringError(f"epsilon must be > 0, got {epsilon}")
    if max_iterations < 1:
        raise ClusteringError(f"max_iterations must be >= 1, got {max_iterations}")

    rng = np.random.default_rng(seed)
    centroids = seed_centroids(summaries, k, rng)
    points = {s.policy_id: s.self_centroid for s in summaries}

    assignment: dict[int, int] = {}
    assigned_to = centroids
    iterations = 0
    delta = epsilon

    while delta >= epsilon:
        if iterations >= max_iterations:
            logger.warning(
                "Clustering stopped after %d iterations (delta %.2f >= epsilon %.2f)",
                iterations,
                delta,
                epsilon,
            )
            break

        assignment = assign_clusters(points, centroids)
        new_centroids = update_centroids(points, assignment, centroids)
        delta = convergence_delta(centroids.values(), new_centroids.values())

        assigned_to = centroids
        centroids = new_centroids
        iterations += 1
        logger.debug(
            "iteration %d: %d clusters, delta %.2f", iterations, len(centroids), delta
        )

    converged = delta < epsilon
    for s in summaries:
        s.centroid = assigned_to[assignment[s.policy_id]]

    logger.info(
        "Clustered %d policies into %d clusters in %d iterations (converged=%s)",
        len(summaries),
        len(assigned_to),
        iterations,
        converged,
    )
    return ClusteringResult(assigned_to, assignment, iterations, converged)
