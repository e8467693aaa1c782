"""
Environment Package.

Seeding and per-worker generator management for reproducible sampling.
"""

from .reproducibility import derive_worker_seed, make_generator, set_seed, worker_init_fn

__all__ = [
    "set_seed",
    "make_generator",
    "derive_worker_seed",
    "worker_init_fn",
]
