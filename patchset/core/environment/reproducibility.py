"""
Reproducibility Environment.

Centralizes RNG seeding. The sampling engine draws classes, paths and crop
origins from an explicit ``torch.Generator`` so that results are reproducible
given a seed. Each concurrent worker must own an independent generator:
``make_generator`` creates one and ``derive_worker_seed`` gives every worker
a distinct but deterministic sub-seed.
"""

import logging
import os
import random

import numpy as np
import torch

_SEED_MODULUS = 2**32


# REPRODUCIBILITY LOGIC
def set_seed(seed: int, strict: bool = False) -> None:
    """Seed all global PRNGs and optionally enforce deterministic algorithms.

    Seeds Python's ``random``, NumPy and PyTorch. The sampler itself does not
    rely on global state, but decoders and downstream consumers may.

    Args:
        seed: The seed value to set across all PRNGs.
        strict: If True, enforces deterministic torch algorithms.
    """
    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)

    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)

    if strict:
        torch.use_deterministic_algorithms(True)
        logging.info("STRICT REPRODUCIBILITY ENABLED: Using deterministic algorithms.")


def make_generator(seed: int | None = None) -> torch.Generator:
    """Create a CPU generator, seeded when *seed* is given, random otherwise.

    Args:
        seed: Seed value, or None to draw a fresh seed from the OS.

    Returns:
        A new, independent ``torch.Generator``.
    """
    generator = torch.Generator()
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(seed % _SEED_MODULUS)
    return generator


def derive_worker_seed(base_seed: int, worker_id: int) -> int:
    """Deterministic per-worker sub-seed for ``(base_seed, worker_id)``."""
    return (base_seed + worker_id) % _SEED_MODULUS


def worker_init_fn(worker_id: int) -> None:
    """Initialize global PRNGs for a DataLoader worker subprocess.

    Each worker receives a unique but deterministic sub-seed derived from
    the parent seed. Called automatically by DataLoader when ``num_workers > 0``.

    Args:
        worker_id: Subprocess ID provided by DataLoader (0-based).
    """
    worker_info = torch.utils.data.get_worker_info()
    if worker_info is None:
        return

    seed = derive_worker_seed(worker_info.seed, worker_id)

    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
