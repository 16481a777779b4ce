"""
Backend selection and management.

Provides a unified interface for the kernel scheduling policies: a pool of
OS threads, a serial reference, and PyTorch's CPU thread pool.
"""

from typing import Optional

from .base import KernelBackend, CPUBackend, partition
from .cpu_threads_backend import ThreadedBackend
from .serial_backend import SerialBackend
from ..config import hardware_concurrency

# PyTorch is optional
try:
    import torch  # noqa: F401
    TORCH_AVAILABLE = True
except ImportError:
    TORCH_AVAILABLE = False

if TORCH_AVAILABLE:
    from .torch_backend import TorchBackend


def get_backend(backend: str = 'auto', workers: Optional[int] = None) -> KernelBackend:
    """
    Get kernel backend.

    Parameters
    ----------
    backend : str
        Backend selection:
        - 'auto': thread pool sized to the hardware
        - 'threads': pool of OS worker threads (NumPy kernels)
        - 'serial': single worker, the reference implementation
        - 'torch': PyTorch CPU intra-op thread pool
    workers : int or None
        Worker count; None means hardware concurrency.
        Ignored by 'serial'.

    Returns
    -------
    KernelBackend
        Backend instance

    Examples
    --------
    >>> backend = get_backend('auto')
    >>> backend = get_backend('threads', workers=4)
    >>> backend = get_backend('serial')
    """
    if backend == 'auto' or backend == 'threads':
        return ThreadedBackend(workers=workers)

    elif backend == 'serial':
        return SerialBackend()

    elif backend == 'torch':
        if not TORCH_AVAILABLE:
            raise RuntimeError(
                "PyTorch backend unavailable.\n"
                "Install: pip install torch"
            )
        return TorchBackend(workers=workers)

    else:
        raise ValueError(
            f"Unknown backend: '{backend}'\n"
            f"Valid options: 'auto', 'threads', 'serial', 'torch'"
        )


def list_available_backends() -> list:
    """List names of available backends."""
    backends = ['threads', 'serial']
    if TORCH_AVAILABLE:
        backends.append('torch')
    return backends


def print_backend_info():
    """Print detailed backend information (diagnostic)."""
    print("PyPolyfit Backend Status")
    print("=" * 50)
    print(f"\nAvailable Backends:")
    print(f"  threads:  ✓ - NumPy kernels on a pool of OS threads")
    print(f"  serial:   ✓ - NumPy kernels on the calling thread (reference)")
    print(f"  torch:    {'✓' if TORCH_AVAILABLE else '✗'} - PyTorch CPU intra-op threads")

    print(f"\nHardware:")
    print(f"  Usable CPUs: {hardware_concurrency()}")

    print(f"\nDefault Backend:")
    try:
        backend = get_backend('auto')
        print(f"  {backend.name} ({backend.workers} workers)")
    except (ValueError, RuntimeError) as e:
        print(f"  Error: {e}")


# Export main interface
__all__ = [
    'get_backend',
    'list_available_backends',
    'print_backend_info',
    'partition',
    'KernelBackend',
    'CPUBackend',
    'ThreadedBackend',
    'SerialBackend',
    'TORCH_AVAILABLE',
]


if __name__ == "__main__":
    print_backend_info()
