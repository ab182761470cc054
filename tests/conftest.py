"""Shared test fixtures for the seamresize test suite."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import torch
import pytest
from seamresize.seam import make_generator

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


@pytest.fixture
def generator():
    """Tie-breaking generator with a fixed seed."""
    return make_generator(1234)


@pytest.fixture
def random_image():
    """Random 12x16 RGB image."""
    g = torch.Generator().manual_seed(7)
    return torch.randint(0, 256, (12, 16, 3), dtype=torch.uint8, generator=g)


def make_image(rows):
    """Build an (H, W, C) uint8 tensor from nested lists of pixel tuples."""
    return torch.tensor(rows, dtype=torch.uint8)


def make_solid_image(H, W, color=(120, 80, 40)):
    """Flat-color image."""
    return torch.tensor(color, dtype=torch.uint8).expand(H, W, len(color)).contiguous()


def make_checkerboard(H, W):
    """Black/white checkerboard, black at (0, 0)."""
    rows = []
    for y in range(H):
        rows.append([WHITE if (x + y) % 2 else BLACK for x in range(W)])
    return make_image(rows)
