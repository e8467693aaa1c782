"""
Data Handler Package

Index construction, compact path storage, balanced sampling, the per-sample
transform pipeline and normalization for ``root/class_name/image`` datasets.
"""

from .builder import IndexBuilder, discover_class_dirs
from .catalog import ClassCatalog
from .dataset import ImagePatchSet
from .decoders import pil_decode
from .enumerators import BulkEnumerator, FindEnumerator, WalkEnumerator, get_enumerator
from .loader import (
    BalancedBatchStream,
    create_sample_loader,
    load_imagenet_patchsets,
    numeric_sort_key,
)
from .normalizer import NormalizationStats, Normalizer, normalize_samples
from .path_store import PathStore
from .sampler import SampleBatch, Sampler
from .transforms import (
    CROP_STRATEGIES,
    CropStrategy,
    DefaultCrop,
    EvalCrop,
    TenCrop,
    TrainCrop,
    TransformPipeline,
    get_crop_strategy,
    rgb_to_yuv,
)

__all__ = [
    # Index
    "IndexBuilder",
    "discover_class_dirs",
    "ClassCatalog",
    "PathStore",
    "BulkEnumerator",
    "FindEnumerator",
    "WalkEnumerator",
    "get_enumerator",
    # Sampling
    "Sampler",
    "SampleBatch",
    "ImagePatchSet",
    # Transforms
    "TransformPipeline",
    "CropStrategy",
    "DefaultCrop",
    "TrainCrop",
    "EvalCrop",
    "TenCrop",
    "CROP_STRATEGIES",
    "get_crop_strategy",
    "rgb_to_yuv",
    "pil_decode",
    # Normalization
    "Normalizer",
    "NormalizationStats",
    "normalize_samples",
    # Loading
    "load_imagenet_patchsets",
    "numeric_sort_key",
    "BalancedBatchStream",
    "create_sample_loader",
]
