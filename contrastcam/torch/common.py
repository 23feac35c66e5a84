"""
Shared helpers for the torch-based contrastcam backend.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import torch


def ensure_tensor(
    data,
    device: Optional[torch.device] = None,
    dtype: torch.dtype = torch.float64,
) -> torch.Tensor:
    """
    Convert input data to a torch tensor on the requested device.
    """

    if isinstance(data, torch.Tensor):
        tensor = data.to(dtype=dtype)
        if device is not None:
            tensor = tensor.to(device)
        return tensor

    if isinstance(data, np.ndarray) and not data.flags.writeable:
        # torch refuses to share memory with read-only arrays
        data = data.copy()

    return torch.as_tensor(data, dtype=dtype, device=device)


def ensure_xyz_tensor(
    data,
    device: Optional[torch.device] = None,
    dtype: torch.dtype = torch.float64,
) -> torch.Tensor:
    """Tristimulus tensor of shape (..., 3)."""

    tensor = ensure_tensor(data, device=device, dtype=dtype)
    if tensor.dim() == 0 or tensor.shape[-1] != 3:
        raise ValueError(f"Expected tristimulus tensor of shape (..., 3), got {tuple(tensor.shape)}")
    return tensor


def first_invalid_index(mask: torch.Tensor) -> str:
    """Human-readable location of the first True entry of ``mask``."""

    if mask.dim() == 0:
        return ""
    index = tuple(int(i) for i in torch.nonzero(mask)[0].tolist())
    return f" at index {index[0] if len(index) == 1 else index}"
