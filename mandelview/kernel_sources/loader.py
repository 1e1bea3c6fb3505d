from __future__ import annotations
import importlib
from typing import Any, Dict

from mandelview.kernel_sources.registry import load_kernel as load_registered


KERNEL_ROOT = "mandelview.kernel_sources"
KERNEL_MODULES = ("cpu.escape",)


def ensure_registered() -> None:
    """Import the kernel modules so their register_kernel() calls run."""
    for name in KERNEL_MODULES:
        importlib.import_module(f"{KERNEL_ROOT}.{name}")


def load_kernel(op_name: str, precision: str) -> Dict[str, Any]:
    """
    Return validated kernel metadata for (op_name, precision).
    """
    ensure_registered()
    meta = load_registered(op_name, precision)
    _validate_meta(meta, f"registry[{op_name}/{precision}]")
    return meta


def _validate_meta(meta: Dict[str, Any], where: str) -> None:
    if "func" not in meta or not callable(meta["func"]):
        raise KeyError(f"{where} must provide a callable 'func'")
    if "arg_order" not in meta or not isinstance(meta["arg_order"], (list, tuple)):
        raise KeyError(f"{where} must provide an 'arg_order' list")
    meta.setdefault("compiled", False)
