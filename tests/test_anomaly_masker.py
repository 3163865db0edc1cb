"""
Unit tests for anomaly masking, ROI composition and region analysis.
"""

import numpy as np
import pytest

from golden_anomaly.detection import AnomalyMasker, MaskCompositor, AnomalyRegionAnalyzer
from golden_anomaly.processing import resize_image
from golden_anomaly.utils import DimensionMismatchError


class TestAnomalyMasker:
    """Tests for AnomalyMasker."""

    def test_self_difference_is_empty(self, gradient_image):
        mask = AnomalyMasker().compute_mask(gradient_image, gradient_image)
        assert mask.shape == gradient_image.shape
        assert np.count_nonzero(mask) == 0

    def test_difference_at_threshold_is_anomalous(self):
        golden = np.full((20, 20), 100, dtype=np.uint8)
        image = golden.copy()
        image[5, 7] = 132
        image[12, 3] = 131  # one below the threshold
        mask = AnomalyMasker(difference_threshold=32).compute_mask(image, golden)
        expected = np.zeros_like(golden)
        expected[5, 7] = 255
        np.testing.assert_array_equal(mask, expected)

    def test_negative_difference_counts(self):
        golden = np.full((10, 10), 100, dtype=np.uint8)
        image = golden.copy()
        image[2, 2] = 10
        mask = AnomalyMasker().compute_mask(image, golden)
        assert mask[2, 2] == 255
        assert np.count_nonzero(mask) == 1

    def test_float_golden_image_is_normalized(self):
        golden = np.full((10, 10), 99.6, dtype=np.float64)
        image = np.full((10, 10), 100, dtype=np.uint8)
        assert np.count_nonzero(AnomalyMasker().compute_mask(image, golden)) == 0

    def test_color_frame_against_gray_golden(self):
        golden = np.full((10, 10), 50, dtype=np.uint8)
        image = np.full((10, 10, 3), 50, dtype=np.uint8)
        mask = AnomalyMasker().compute_mask(image, golden)
        assert mask.shape == (10, 10)
        assert np.count_nonzero(mask) == 0

    def test_size_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            AnomalyMasker().compute_mask(
                np.zeros((10, 10), dtype=np.uint8),
                np.zeros((10, 12), dtype=np.uint8)
            )

    def test_speckle_removal(self):
        golden = np.zeros((30, 30), dtype=np.uint8)
        image = golden.copy()
        image[3, 3] = 255
        image[10:20, 10:20] = 255
        mask = AnomalyMasker(speckle_iterations=1).compute_mask(image, golden)
        assert mask[3, 3] == 0
        assert np.count_nonzero(mask) == 100

    def test_compute_masks_one_per_image(self, uniform_set_with_block):
        golden = uniform_set_with_block[0]
        masks = AnomalyMasker().compute_masks(uniform_set_with_block, golden)
        assert len(masks) == 5
        assert all(np.count_nonzero(m) == 0 for m in masks[:4])
        assert np.count_nonzero(masks[4]) == 100


class TestMaskCompositor:
    """Tests for MaskCompositor."""

    @pytest.fixture
    def mask_and_roi(self):
        rng = np.random.default_rng(7)
        mask = (rng.random((40, 40)) > 0.5).astype(np.uint8) * 255
        roi = np.zeros((40, 40), dtype=np.uint8)
        roi[:, :20] = 255
        return mask, roi

    def test_apply_roi(self, mask_and_roi):
        mask, roi = mask_and_roi
        result = MaskCompositor().apply_roi_single(mask, roi)
        assert np.all(result[roi == 0] == 0)
        np.testing.assert_array_equal(result[roi == 255], mask[roi == 255])

    def test_apply_roi_is_idempotent(self, mask_and_roi):
        mask, roi = mask_and_roi
        compositor = MaskCompositor()
        once = compositor.apply_roi([mask], roi)[0]
        twice = compositor.apply_roi([once], roi)[0]
        np.testing.assert_array_equal(once, twice)

    def test_apply_roi_does_not_modify_input(self, mask_and_roi):
        mask, roi = mask_and_roi
        original = mask.copy()
        MaskCompositor().apply_roi_single(mask, roi)
        np.testing.assert_array_equal(mask, original)

    def test_apply_roi_size_mismatch(self, mask_and_roi):
        mask, _ = mask_and_roi
        with pytest.raises(DimensionMismatchError):
            MaskCompositor().apply_roi_single(mask, np.zeros((10, 10), dtype=np.uint8))

    def test_restore_resolution(self):
        masks = MaskCompositor().restore_resolution([np.zeros((25, 25), dtype=np.uint8)], (100, 80))
        assert masks[0].shape == (80, 100)

    def test_resize_round_trip_keeps_topology(self):
        mask = np.zeros((100, 100), dtype=np.uint8)
        mask[10:30, 10:30] = 255
        mask[60:80, 55:85] = 255

        small = resize_image(mask, scale_factor=0.25)
        restored = MaskCompositor().restore_resolution_single(small, (100, 100))
        assert restored.shape == mask.shape

        analyzer = AnomalyRegionAnalyzer()
        assert analyzer.count_regions(restored) == analyzer.count_regions(mask) == 2

        # Boundaries move, overall footprint does not
        original = mask >= 128
        recovered = restored >= 128
        iou = np.logical_and(original, recovered).sum() / np.logical_or(original, recovered).sum()
        assert iou > 0.7


class TestAnomalyRegionAnalyzer:
    """Tests for AnomalyRegionAnalyzer."""

    def test_region_properties(self):
        mask = np.zeros((60, 60), dtype=np.uint8)
        mask[30:40, 20:30] = 255
        regions = AnomalyRegionAnalyzer().extract_regions(mask)
        assert len(regions) == 1
        region = regions[0]
        assert region.bbox == (20, 30, 10, 10)
        assert region.area == 100
        assert region.centroid == pytest.approx((24.5, 34.5))
        assert region.to_dict()['bbox'] == [20, 30, 10, 10]

    def test_min_area_filter_and_order(self):
        mask = np.zeros((60, 60), dtype=np.uint8)
        mask[5, 5] = 255
        mask[20:25, 20:25] = 255
        mask[40:50, 40:50] = 255
        regions = AnomalyRegionAnalyzer(min_region_area=4).extract_regions(mask)
        assert [r.area for r in regions] == [100, 25]

    def test_soft_edges_use_level(self):
        mask = np.zeros((10, 10), dtype=np.uint8)
        mask[2:4, 2:4] = 60
        assert AnomalyRegionAnalyzer().count_regions(mask) == 0
