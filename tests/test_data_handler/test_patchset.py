"""
Test Suite for the ImagePatchSet facade.

Builds small image trees on disk with Pillow and exercises the public
dataset API end to end: class table, indexed and balanced access, the torch
Dataset protocol, sample property updates and normalization.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
import torch
from torch.utils.data import DataLoader

from patchset.core.config import Config, IndexConfig, NormalizationConfig, SampleConfig
from patchset.data_handler.dataset import ImagePatchSet
from patchset.exceptions import EmptyClassError


@pytest.fixture
def patchset(balanced_tree, small_cfg) -> ImagePatchSet:
    return ImagePatchSet.from_directories(
        balanced_tree, small_cfg, enumerator="walk", seed=0, verbose=False
    )


# TEST: Construction
@pytest.mark.integration
def test_class_table(patchset):
    """Classes are sorted and indexed from zero."""
    assert patchset.classes == ("alpha", "beta", "gamma")
    assert patchset.class_to_idx == {"alpha": 0, "beta": 1, "gamma": 2}
    assert len(patchset) == 12


@pytest.mark.integration
def test_size_per_class(patchset):
    """size() reports totals and per-class counts by name or index."""
    assert patchset.size() == 12
    assert patchset.size("beta") == 4
    assert patchset.size(2) == 4


@pytest.mark.integration
def test_from_config(balanced_tree):
    """A Config drives discovery, geometry and seeding."""
    cfg = Config(
        index=IndexConfig(roots=balanced_tree, enumerator="walk", verbose=False),
        sample=SampleConfig(shape=(1, 8, 8)),
        seed=5,
        log_level="WARNING",
    )
    ds = ImagePatchSet.from_config(cfg)

    assert ds.sample(2).samples.shape == (2, 1, 8, 8)
    assert ds.seed == 5


@pytest.mark.integration
def test_from_config_drives_normalization_fit(balanced_tree):
    """normalization() defaults come from the config's normalization section."""
    cfg = Config(
        index=IndexConfig(roots=balanced_tree, enumerator="walk", verbose=False),
        sample=SampleConfig(shape=(3, 8, 8)),
        normalization=NormalizationConfig(target_image_count=6, batch_size=3, samples_per_image=1),
        seed=1,
    )
    ds = ImagePatchSet.from_config(cfg)

    with patch.object(ds.sampler, "sample", wraps=ds.sampler.sample) as sample:
        ds.normalization()

    assert sample.call_count == 2
    assert sample.call_args_list[0].args == (3, 1)


@pytest.mark.integration
def test_normalization_arguments_override_config(patchset):
    """Explicit arguments win over the configured defaults."""
    with patch.object(patchset.sampler, "sample", wraps=patchset.sampler.sample) as sample:
        patchset.normalization(target_image_count=4, batch_size=4, samples_per_image=2)

    assert sample.call_count == 1
    assert sample.call_args.args == (4, 2)


@pytest.mark.integration
def test_empty_class_fails_build(make_tree, tmp_path, small_cfg):
    """One empty class directory aborts dataset construction."""
    root = make_tree(tmp_path / "data", {"full": [(16, 16, "RGB")]})
    (root / "hollow").mkdir()

    with pytest.raises(EmptyClassError):
        ImagePatchSet.from_directories(root, small_cfg, enumerator="walk", verbose=False)


# TEST: Access
@pytest.mark.integration
def test_getitem_returns_sample_and_label(patchset):
    """Dataset protocol yields (C, H, W) float samples with long labels."""
    sample, label = patchset[5]

    assert sample.shape == (3, 8, 8)
    assert sample.dtype == torch.float32
    assert label.dtype == torch.long
    assert label.item() == 1


@pytest.mark.integration
def test_getitem_ten_crop_stacks_views(balanced_tree):
    """With the ten-crop variant one item holds ten views."""
    ds = ImagePatchSet.from_directories(
        balanced_tree, SampleConfig(shape=(3, 8, 8), variant="ten_crop"),
        enumerator="walk", verbose=False,
    )
    sample, _ = ds[0]
    assert sample.shape == (10, 3, 8, 8)


@pytest.mark.integration
def test_map_style_dataloader(patchset):
    """The dataset plugs into a standard DataLoader."""
    samples, labels = next(iter(DataLoader(patchset, batch_size=4, shuffle=False)))
    assert samples.shape == (4, 3, 8, 8)
    assert labels.tolist() == [0, 0, 0, 0]


@pytest.mark.integration
def test_grayscale_images_are_served_as_rgb_shape(make_tree, tmp_path, small_cfg):
    """Grayscale sources are replicated to three channels."""
    root = make_tree(tmp_path / "gray", {"g": [(12, 12, "L")] * 2})
    ds = ImagePatchSet.from_directories(root, small_cfg, enumerator="walk", verbose=False)

    sample, _ = ds[0]
    assert sample.shape == (3, 8, 8)
    assert torch.allclose(sample[1:], torch.zeros(2, 8, 8), atol=1e-4)


@pytest.mark.integration
def test_seeded_datasets_sample_identically(balanced_tree, small_cfg):
    """Same seed, same balanced batches."""
    kwargs = {"enumerator": "walk", "seed": 9, "verbose": False}
    a = ImagePatchSet.from_directories(balanced_tree, small_cfg, **kwargs).sample(6, 2)
    b = ImagePatchSet.from_directories(balanced_tree, small_cfg, **kwargs).sample(6, 2)

    assert torch.equal(a.samples, b.samples)
    assert a.paths == b.paths


# TEST: Sample Properties
@pytest.mark.integration
def test_set_sample_properties_merges(patchset):
    """Only the given properties change; the rest is kept."""
    cfg = patchset.set_sample_properties(samples_per_image=3, train_center_first=True)

    assert cfg.samples_per_image == 3
    assert cfg.train_center_first is True
    assert cfg.shape == (3, 8, 8)
    assert patchset.sample(2).samples.shape == (6, 3, 8, 8)


@pytest.mark.integration
def test_set_sample_properties_validates(patchset):
    """Invalid values are rejected by the schema."""
    with pytest.raises(ValueError):
        patchset.set_sample_properties(samples_per_image=0)


# TEST: Normalization
@pytest.mark.integration
def test_normalization_fit_and_apply(patchset):
    """Once fitted and enabled, batches come back normalized."""
    stats = patchset.normalization(target_image_count=24, batch_size=12)
    assert stats.num_channels == 3

    patchset.set_sample_properties(normalize=True)
    batch = patchset.sample(12, 2).samples
    assert abs(batch[:, 0].mean().item()) < 0.5


@pytest.mark.integration
def test_normalize_samples_without_fit_is_noop(patchset):
    """The facade's normalize_samples is a no-op before fitting."""
    batch = torch.rand(2, 3, 8, 8)
    expected = batch.clone()
    assert torch.equal(patchset.normalize_samples(batch), expected)


@pytest.mark.integration
def test_repr(patchset):
    """repr summarizes the dataset."""
    assert repr(patchset) == "ImagePatchSet(classes=3, images=12, shape=(3, 8, 8))"
