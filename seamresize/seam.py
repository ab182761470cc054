"""
Minimum-cost seam computation.

Dynamic programming over the energy field (Avidan & Shamir 2007): the cost of
a pixel is its energy plus the cheapest of the up-to-three pixels above it.
Equal-cost choices are broken uniformly at random with an explicit generator;
a fixed seed reproduces the same seams.
"""

import logging
import time
from typing import Optional, Tuple

import torch

from .buffer import allocate
from .exceptions import InvalidDimensionsError

logger = logging.getLogger("seamresize.seam")

_BLOCKED = torch.iinfo(torch.int64).max


def make_generator(seed: Optional[int] = None) -> torch.Generator:
    """
    Create the random generator used for tie-breaking.

    Args:
        seed: Fixed seed for reproducible seams. Time-based if None.

    Returns:
        Seeded CPU torch.Generator
    """
    if seed is None:
        seed = time.time_ns() & 0xFFFFFFFF
        logger.debug("Using time-based seed %d", seed)
    generator = torch.Generator()
    generator.manual_seed(seed)
    return generator


def _pick_tied(tied: torch.Tensor, generator: Optional[torch.Generator]) -> torch.Tensor:
    """Choose uniformly among the True entries of `tied` along dim 0.

    Each candidate draws an i.i.d. uniform number; the largest draw among the
    tied candidates wins.
    """
    draws = torch.rand(tied.shape, generator=generator)
    draws = draws.masked_fill(~tied, -1.0)
    return draws.argmax(dim=0)


def cumulative_cost(energy: torch.Tensor,
                    generator: Optional[torch.Generator] = None
                    ) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Accumulate minimum seam cost from the top row down.

    cost[y, x] = energy[y, x] + min(cost[y-1, x-1], cost[y-1, x], cost[y-1, x+1])

    Parents outside the image are skipped. When several parents share the
    minimum, one of them is chosen uniformly at random.

    Args:
        energy: Energy map (H, W)
        generator: Random generator for tie-breaking

    Returns:
        cost: Accumulated cost (H, W), int64
        parents: Column of the chosen parent in the row above (H, W), int64.
                 Row 0 points at itself.
    """
    if energy.dim() != 2:
        raise ValueError(f"Energy must be (H, W), got shape {tuple(energy.shape)}")
    H, W = energy.shape
    if H < 1:
        raise InvalidDimensionsError('height', H)
    if W < 1:
        raise InvalidDimensionsError('width', W)

    cost = allocate((H, W), torch.int64)
    cost.copy_(energy)
    cols = torch.arange(W)
    parents = allocate((H, W), torch.int64)
    parents[0] = cols

    candidates = allocate((3, W), torch.int64)
    for y in range(1, H):
        prev = cost[y - 1]
        # Rows: above-left, above, above-right
        candidates.fill_(_BLOCKED)
        candidates[0, 1:] = prev[:-1]
        candidates[1] = prev
        candidates[2, :-1] = prev[1:]

        best = candidates.min(dim=0).values
        choice = _pick_tied(candidates == best, generator)
        parents[y] = cols + choice - 1
        cost[y] += best

    return cost, parents


def find_seam(energy: torch.Tensor,
              generator: Optional[torch.Generator] = None) -> torch.Tensor:
    """
    Find the globally cheapest vertical seam.

    The seam ends at the bottom-row column with minimum accumulated cost
    (uniformly random among ties) and is traced back through the parents.

    Args:
        energy: Energy map (H, W)
        generator: Random generator for tie-breaking

    Returns:
        Seam indices (H,) with the column index per row
    """
    cost, parents = cumulative_cost(energy, generator)
    H = cost.shape[0]

    last = cost[-1]
    col = int(_pick_tied(last == last.min(), generator))

    parent_rows = parents.tolist()
    seam = [0] * H
    for y in range(H - 1, -1, -1):
        seam[y] = col
        col = parent_rows[y][col]

    return torch.tensor(seam, dtype=torch.long)


def seam_energy(energy: torch.Tensor, seam: torch.Tensor) -> int:
    """Total energy of the pixels on a vertical seam."""
    rows = torch.arange(energy.shape[0])
    return int(energy[rows, seam].to(torch.int64).sum())
