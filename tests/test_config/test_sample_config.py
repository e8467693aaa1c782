"""
Test Suite for SampleConfig, IndexConfig and NormalizationConfig.

Tests defaults, field constraints, immutability and cross-field validation.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from patchset.core.config import IndexConfig, NormalizationConfig, SampleConfig


# SAMPLE CONFIG
@pytest.mark.unit
def test_sample_config_defaults():
    """Defaults describe 3x51x51 samples, one per image, no normalization."""
    cfg = SampleConfig()

    assert cfg.shape == (3, 51, 51)
    assert (cfg.channels, cfg.height, cfg.width) == (3, 51, 51)
    assert cfg.samples_per_image == 1
    assert cfg.variant == "default"
    assert cfg.normalize is False
    assert cfg.max_retries == 1000


@pytest.mark.unit
@pytest.mark.parametrize("shape", [(2, 8, 8), (3, 0, 8), (3, 8, 5000)])
def test_sample_config_rejects_bad_shapes(shape):
    """Channels must be 1 or 3 and sizes in range."""
    with pytest.raises(ValidationError):
        SampleConfig(shape=shape)


@pytest.mark.unit
def test_sample_config_rejects_unknown_variant():
    """Only the known crop strategies are accepted."""
    with pytest.raises(ValidationError):
        SampleConfig(variant="five_crop")


@pytest.mark.unit
def test_ten_crop_requires_single_sample_per_image():
    """Ten-crop and samples_per_image > 1 are mutually exclusive."""
    with pytest.raises(ValidationError, match="ten_crop"):
        SampleConfig(variant="ten_crop", samples_per_image=2)


@pytest.mark.unit
def test_max_retries_none_means_unbounded():
    """max_retries accepts None, rejects zero."""
    assert SampleConfig(max_retries=None).max_retries is None
    with pytest.raises(ValidationError):
        SampleConfig(max_retries=0)


@pytest.mark.unit
def test_sample_config_is_frozen():
    """Configs are immutable."""
    cfg = SampleConfig()
    with pytest.raises(ValidationError):
        cfg.samples_per_image = 4


@pytest.mark.unit
def test_sample_config_forbids_extra_fields():
    """Typos in field names are rejected."""
    with pytest.raises(ValidationError):
        SampleConfig(samples_per_imgae=2)


# INDEX CONFIG
@pytest.mark.unit
def test_index_config_single_root_coerced(tmp_path):
    """A single root becomes a one-element absolute tuple."""
    cfg = IndexConfig(roots=str(tmp_path))
    assert cfg.roots == (tmp_path.resolve(),)


@pytest.mark.unit
def test_index_config_expands_user():
    """~ is expanded in roots."""
    cfg = IndexConfig(roots=["~/images"])
    assert cfg.roots[0] == (Path.home() / "images").resolve()


@pytest.mark.unit
def test_index_config_requires_roots():
    """At least one root is required."""
    with pytest.raises(ValidationError):
        IndexConfig(roots=[])


@pytest.mark.unit
def test_index_config_enumerator_choices(tmp_path):
    """Enumerator names are restricted to known backends."""
    assert IndexConfig(roots=tmp_path, enumerator="walk").enumerator == "walk"
    with pytest.raises(ValidationError):
        IndexConfig(roots=tmp_path, enumerator="locate")


# NORMALIZATION CONFIG
@pytest.mark.unit
def test_normalization_config_defaults():
    """Default fit draws 10000 images, 128 per batch, 2 crops each."""
    cfg = NormalizationConfig()
    assert (cfg.target_image_count, cfg.batch_size, cfg.samples_per_image) == (10000, 128, 2)


@pytest.mark.unit
def test_normalization_config_positive_sizes():
    """Zero sizes are invalid."""
    with pytest.raises(ValidationError):
        NormalizationConfig(batch_size=0)
