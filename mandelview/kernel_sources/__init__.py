# Kernel sources package
from .loader import load_kernel, ensure_registered
from .registry import register_kernel, list_kernels

__all__ = [
    "load_kernel",
    "ensure_registered",
    "register_kernel",
    "list_kernels",
]
