"""Signal statistics used by the streaming windows.

Modules here operate on plain sequences or NumPy arrays and stay free of
threading and I/O so they can be reused in tests and offline scripts alike.
"""

from .features import rms

__all__ = ["rms"]
