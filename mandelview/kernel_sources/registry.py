from __future__ import annotations
from typing import Any, Dict, List

# Nested dict: [op_name][precision] -> meta
_REGISTRY: Dict[str, Dict[str, Dict[str, Any]]] = {}


def register_kernel(op_name: str, precision: str, **meta: Any) -> None:
    """
    Register kernel metadata for a given operation and precision tag.
    Example:
        register_kernel("shade", "f64", func=shade_chunk, arg_order=[...], compiled=True)
    """
    _REGISTRY.setdefault(op_name, {})[precision] = meta


def load_kernel(op_name: str, precision: str) -> Dict[str, Any]:
    """
    Load kernel metadata from the registry for the given parameters.
    Raises KeyError if not found.
    """
    try:
        meta = _REGISTRY[op_name][precision]
    except KeyError as e:
        raise KeyError(f"Kernel not found for op='{op_name}', precision='{precision}'") from e
    return meta


def list_kernels(precision: str) -> List[str]:
    """
    List all registered operation names for the given precision.
    """
    return sorted(op for op, by_precision in _REGISTRY.items() if precision in by_precision)
