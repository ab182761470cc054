"""
Energy function for seam carving.

The energy function determines which pixels are "important".
Low-energy seams are preferred for removal.

We use a 4-neighbour color gradient: the squared, normalized differences
between the left/right and the up/down neighbours of each pixel. It is
cheaper than a Sobel filter and is symmetric under channel reordering.
"""

import torch

from .exceptions import AllocationError


def gradient_energy(pixels: torch.Tensor) -> torch.Tensor:
    """
    Compute the local color-gradient energy of an image.

    For each pixel (x, y) and color channel c:
        dx_c = |I(x+1, y) - I(x-1, y)| / 255
        dy_c = |I(x, y+1) - I(x, y-1)| / 255
        E = min(1, sum_c dx_c^2 + sum_c dy_c^2)

    A neighbour outside the image is replaced by the pixel itself, giving a
    zero gradient across the border. Only the color channels take part: the
    first three for RGB(A), the single luminance channel for L(A).
    E is quantized to 0..255 by truncation.

    Args:
        pixels: uint8 image tensor (H, W, C)

    Returns:
        Energy map (H, W), dtype uint8
    """
    n_color = 3 if pixels.shape[2] >= 3 else 1
    try:
        color = pixels[:, :, :n_color].to(torch.float32)

        # Neighbours with the center pixel standing in past the border
        left = torch.cat([color[:, :1], color[:, :-1]], dim=1)
        right = torch.cat([color[:, 1:], color[:, -1:]], dim=1)
        above = torch.cat([color[:1], color[:-1]], dim=0)
        below = torch.cat([color[1:], color[-1:]], dim=0)

        dx = torch.abs(right - left) / 255.0
        dy = torch.abs(below - above) / 255.0
        grad_x = (dx * dx).sum(dim=2)
        grad_y = (dy * dy).sum(dim=2)

        energy = torch.clamp(grad_x + grad_y, max=1.0)
        return (energy * 255.0).to(torch.uint8)
    except (MemoryError, RuntimeError) as exc:
        raise AllocationError(tuple(pixels.shape[:2])) from exc
