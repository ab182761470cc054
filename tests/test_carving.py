"""
Tests for carving: single seam removal, width reduction and height reduction.

Organized into:
  1. Seam removal (pixel bookkeeping, growth rejection)
  2. Width reduction (intermediate widths, seams, determinism)
  3. Height reduction via transposition
"""

import sys
import os
import itertools
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import torch
import pytest
from seamresize.carving import carve_seam, change_height, change_width, remove_seam
from seamresize.energy import gradient_energy
from seamresize.exceptions import AllocationError, InvalidDimensionsError, UnsupportedOperationError
from seamresize.seam import make_generator, seam_energy

from conftest import BLACK, WHITE, make_checkerboard, make_image, make_solid_image


def index_image(H, W):
    """Image whose red channel is the column index and green the row index."""
    rows = [[(x, y, 7) for x in range(W)] for y in range(H)]
    return make_image(rows)


# ---------------------------------------------------------------------------
# 1. Seam removal
# ---------------------------------------------------------------------------

class TestRemoveSeam:
    def test_preserves_non_seam_pixels(self):
        """After removing a seam, remaining pixels keep their order and values."""
        image = index_image(4, 10)
        seam = torch.full((4,), 5, dtype=torch.long)
        carved = remove_seam(image, seam)

        assert carved.shape == (4, 9, 3)
        for y in range(4):
            assert carved[y, :, 0].tolist() == [0, 1, 2, 3, 4, 6, 7, 8, 9]
            assert (carved[y, :, 1] == y).all()

    def test_with_varying_positions(self):
        """Seam that zigzags removes correct pixel from each row."""
        image = index_image(3, 6)
        carved = remove_seam(image, torch.tensor([2, 3, 2]))

        assert carved[0, :, 0].tolist() == [0, 1, 3, 4, 5]
        assert carved[1, :, 0].tolist() == [0, 1, 2, 4, 5]
        assert carved[2, :, 0].tolist() == [0, 1, 3, 4, 5]

    def test_edge_columns(self):
        image = index_image(2, 4)
        carved = remove_seam(image, torch.tensor([0, 3]))
        assert carved[0, :, 0].tolist() == [1, 2, 3]
        assert carved[1, :, 0].tolist() == [0, 1, 2]

    def test_source_not_modified(self):
        image = index_image(3, 5)
        before = image.clone()
        remove_seam(image, torch.tensor([1, 2, 3]))
        assert torch.equal(image, before)

    def test_writes_into_out(self):
        image = index_image(3, 5)
        out = torch.zeros(3, 4, 3, dtype=torch.uint8)
        result = remove_seam(image, torch.tensor([4, 4, 4]), out=out)
        assert result.data_ptr() == out.data_ptr()
        assert out[:, :, 0].tolist() == [[0, 1, 2, 3]] * 3

    def test_rejects_wrong_seam_length(self):
        with pytest.raises(ValueError):
            remove_seam(index_image(3, 5), torch.tensor([1, 1]))

    def test_rejects_out_of_range_seam(self):
        with pytest.raises(ValueError):
            remove_seam(index_image(2, 5), torch.tensor([1, 5]))


class TestCarveSeam:
    def test_shrinks_by_one(self):
        carved = carve_seam(index_image(3, 5), torch.tensor([0, 1, 2]), 4)
        assert carved.shape == (3, 4, 3)

    def test_growth_is_unsupported(self):
        image = index_image(3, 5)
        with pytest.raises(UnsupportedOperationError) as info:
            carve_seam(image, torch.tensor([0, 1, 2]), 6)
        assert info.value.axis == 'width'
        assert (info.value.current, info.value.requested) == (5, 6)

    def test_other_widths_rejected(self):
        with pytest.raises(ValueError):
            carve_seam(index_image(3, 5), torch.tensor([0, 1, 2]), 3)


# ---------------------------------------------------------------------------
# 2. Width reduction
# ---------------------------------------------------------------------------

class TestChangeWidth:
    def test_reduces_width(self, random_image, generator):
        carved = change_width(random_image, 10, generator)
        assert carved.shape == (12, 10, 3)
        assert carved.dtype == torch.uint8

    def test_passes_through_every_intermediate_width(self, random_image, generator):
        """W -> W-k visits W-1, ..., W-k once each, with valid seams."""
        seen = []

        def record(width, seam):
            seen.append(width)
            assert seam.shape == (12,)
            assert torch.abs(seam[1:] - seam[:-1]).max() <= 1
            assert seam.min() >= 0 and seam.max() <= width

        change_width(random_image, 9, generator, on_seam=record)
        assert seen == [15, 14, 13, 12, 11, 10, 9]

    def test_rows_keep_relative_order(self, generator):
        """Each output row is a subsequence of the input row."""
        image = index_image(6, 12)
        carved = change_width(image, 7, generator)
        for y in range(6):
            cols = carved[y, :, 0].tolist()
            assert cols == sorted(cols)
            assert len(set(cols)) == 7
            assert (carved[y, :, 1] == y).all()

    def test_same_width_returns_copy(self, random_image, generator):
        carved = change_width(random_image, 16, generator)
        assert torch.equal(carved, random_image)
        assert carved.data_ptr() != random_image.data_ptr()

    def test_growth_rejected_before_work(self, random_image, generator):
        before = random_image.clone()
        calls = []
        with pytest.raises(UnsupportedOperationError):
            change_width(random_image, 17, generator, on_seam=lambda w, s: calls.append(w))
        assert calls == []
        assert torch.equal(random_image, before)

    def test_zero_width_rejected(self, random_image, generator):
        with pytest.raises(InvalidDimensionsError):
            change_width(random_image, 0, generator)

    def test_down_to_one_column(self, random_image, generator):
        carved = change_width(random_image, 1, generator)
        assert carved.shape == (12, 1, 3)

    def test_fixed_seed_is_byte_identical(self, random_image):
        first = change_width(random_image, 8, make_generator(5))
        second = change_width(random_image, 8, make_generator(5))
        assert torch.equal(first, second)

    def test_seam_avoids_high_energy_edge(self, generator):
        """The sharp vertical edge survives carving."""
        image = make_solid_image(10, 20, BLACK).clone()
        image[:, 10:] = 255
        carved = change_width(image, 15, generator)
        values = carved[5, :, 0].to(torch.int64)
        diffs = (values[1:] - values[:-1]).abs()
        assert diffs.max() == 255

    def test_source_not_modified(self, random_image, generator):
        before = random_image.clone()
        change_width(random_image, 11, generator)
        assert torch.equal(random_image, before)

    def test_keeps_alpha_channel(self, generator):
        image = torch.randint(0, 256, (5, 8, 4), dtype=torch.uint8)
        carved = change_width(image, 6, generator)
        assert carved.shape == (5, 6, 4)


class TestEndToEndScenarios:
    def test_black_white_white_black_row(self):
        """4x1 [black, white, white, black] -> 3x1 with one column removed.

        All four pixels have saturated energy, so the removed column is a
        uniform tie-break that a fixed seed reproduces.
        """
        image = make_image([[BLACK, WHITE, WHITE, BLACK]])
        candidates = [
            [p for i, p in enumerate([BLACK, WHITE, WHITE, BLACK]) if i != drop]
            for drop in range(4)
        ]

        results = []
        for seed in range(200):
            carved = change_width(image, 3, make_generator(seed))
            assert carved.shape == (1, 3, 3)
            row = [tuple(p) for p in carved[0].tolist()]
            assert row in candidates
            results.append(candidates.index(row))

        # Dropping either white gives the same row, so three distinct outcomes
        assert set(results) == {0, 1, 3}
        again = change_width(image, 3, make_generator(17))
        assert torch.equal(again, change_width(image, 3, make_generator(17)))

    def test_checkerboard_removes_minimum_seam(self):
        """3x3 checkerboard -> 2x3: the removed seam is a brute-force minimum."""
        image = make_checkerboard(3, 3)
        energy = gradient_energy(image)

        removed = []
        carved = change_width(image, 2, make_generator(3),
                              on_seam=lambda w, s: removed.append(s))
        assert carved.shape == (3, 2, 3)
        assert len(removed) == 1

        seam = removed[0]
        best = min(
            seam_energy(energy, torch.tensor(list(s)))
            for s in itertools.product(range(3), repeat=3)
            if all(abs(a - b) <= 1 for a, b in zip(s, s[1:]))
        )
        assert seam_energy(energy, seam) == best
        assert torch.equal(carved, remove_seam(image, seam))


# ---------------------------------------------------------------------------
# 3. Height reduction
# ---------------------------------------------------------------------------

class TestChangeHeight:
    def test_reduces_height(self, random_image, generator):
        carved = change_height(random_image, 7, generator)
        assert carved.shape == (7, 16, 3)

    def test_columns_keep_relative_order(self, generator):
        image = index_image(10, 4)
        carved = change_height(image, 6, generator)
        assert carved.shape == (6, 4, 3)
        for x in range(4):
            rows = carved[:, x, 1].tolist()
            assert rows == sorted(rows)
            assert len(set(rows)) == 6
            assert (carved[:, x, 0] == x).all()

    def test_matches_transposed_width_carve(self, random_image):
        """Carving height equals carving the width of the transposed image."""
        by_height = change_height(random_image, 8, make_generator(11))
        transposed = random_image.transpose(0, 1).contiguous()
        by_width = change_width(transposed, 8, make_generator(11))
        assert torch.equal(by_height, by_width.transpose(0, 1))

    def test_horizontal_seams_span_width(self, random_image, generator):
        heights = []

        def record(height, seam):
            heights.append(height)
            assert seam.shape == (16,)

        change_height(random_image, 9, generator, on_seam=record)
        assert heights == [11, 10, 9]

    def test_growth_rejected(self, random_image, generator):
        with pytest.raises(UnsupportedOperationError) as info:
            change_height(random_image, 13, generator)
        assert info.value.axis == 'height'

    def test_zero_height_rejected(self, random_image, generator):
        with pytest.raises(InvalidDimensionsError):
            change_height(random_image, 0, generator)

    def test_same_height_returns_copy(self, random_image, generator):
        assert torch.equal(change_height(random_image, 12, generator), random_image)


# ---------------------------------------------------------------------------
# 4. Allocation failures
# ---------------------------------------------------------------------------

def fail_allocation(*args, **kwargs):
    raise RuntimeError("DefaultCPUAllocator: not enough memory")


class TestAllocationFailures:
    def test_change_width_scratch(self, random_image, generator, monkeypatch):
        monkeypatch.setattr(torch, "empty", fail_allocation)
        with pytest.raises(AllocationError):
            change_width(random_image, 10, generator)

    def test_change_width_same_width_copy(self, random_image, monkeypatch):
        monkeypatch.setattr(torch, "empty", fail_allocation)
        with pytest.raises(AllocationError):
            change_width(random_image, random_image.shape[1])

    def test_change_height_same_height_copy(self, random_image, monkeypatch):
        monkeypatch.setattr(torch, "empty", fail_allocation)
        with pytest.raises(AllocationError):
            change_height(random_image, random_image.shape[0])

    def test_change_height_transpose(self, random_image, generator, monkeypatch):
        monkeypatch.setattr(torch, "empty", fail_allocation)
        with pytest.raises(AllocationError):
            change_height(random_image, 5, generator)

    def test_energy_failure_mid_carve(self, random_image, generator, monkeypatch):
        """A failed energy field during the loop surfaces as AllocationError."""
        monkeypatch.setattr(torch, "cat", fail_allocation)
        with pytest.raises(AllocationError):
            change_width(random_image, 10, generator)
