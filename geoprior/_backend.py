"""
_backend.py
===========
Which implementation answers ``Region.contains``.

  'python'        Loop over ``Region.is_inside``; the reference result.
  'cpu-parallel'  ``_kernels._contains_njit``, compiled by numba.

'best' means the last entry of ``get_available_backends()``.  Nothing here
logs; ``_region`` reports availability once, on import.
"""

from typing import List


def check_numba_available() -> bool:
    """True if ``import numba`` succeeds."""
    try:
        import numba  # noqa: F401

        return True
    except ImportError:
        return False


def get_available_backends() -> List[str]:
    """
    Backends usable in this interpreter, slowest first.

    >>> get_available_backends()
    ['python', 'cpu-parallel']
    """
    backends = ["python"]
    if check_numba_available():
        backends.append("cpu-parallel")
    return backends


def get_best_backend() -> str:
    return get_available_backends()[-1]


def resolve_backend(backend: str) -> str:
    """
    Turn a ``backend=`` argument into a concrete backend name.

    Raises
    ------
    ValueError
        If *backend* is neither 'best' nor an available backend.
    """
    if backend == "best":
        return get_best_backend()

    available = get_available_backends()
    if backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available for region containment. "
            f"Available backends: {', '.join(available)}"
        )
    return backend


def get_backend_info() -> dict:
    """Summary with keys 'numba_available', 'backends' and 'best_backend'."""
    backends = get_available_backends()
    return {
        "numba_available": "cpu-parallel" in backends,
        "backends": backends,
        "best_backend": backends[-1],
    }
