"""
GPU-accelerated contrast compensation backed by PyTorch.
"""

from contrastcam.torch.appearance import TorchCIECAM02
from contrastcam.torch.compensation import TorchContrastCompensator, compensate_xyz_torch

__all__ = ["TorchCIECAM02", "TorchContrastCompensator", "compensate_xyz_torch"]
