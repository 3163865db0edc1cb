"""
Tests for the command-line interface.
"""

import cv2
import numpy as np
import pytest
from click.testing import CliRunner

from golden_anomaly.interface import cli


@pytest.fixture
def frames_dir(tmp_path, gradient_image):
    directory = tmp_path / "frames"
    directory.mkdir()
    for i in range(4):
        frame = cv2.cvtColor(gradient_image, cv2.COLOR_GRAY2BGR)
        if i == 3:
            frame[30:50, 30:50] = 255
        cv2.imwrite(str(directory / f"f{i}.png"), frame)
    return directory


def _base_args(tmp_path):
    return ['--config', str(tmp_path / "none.yaml"), '--log-level', 'ERROR']


class TestCli:
    """Tests for the click commands."""

    def test_run(self, tmp_path, frames_dir):
        out = tmp_path / "out"
        result = CliRunner().invoke(cli, _base_args(tmp_path) + [
            'run', '-i', str(frames_dir), '-p', '*.png', '-o', str(out),
            '--scale', '0.5', '--samples', '-1', '--workers', '2'
        ])
        assert result.exit_code == 0, result.output
        assert (out / "golden_image.png").exists()
        assert (out / "ROI_mask.png").exists()
        for i in range(1, 5):
            mask = cv2.imread(str(out / "Masks" / f"mask{i}.png"), cv2.IMREAD_GRAYSCALE)
            assert mask.shape == (100, 100)
        assert (out / "report.json").exists()

    def test_run_with_figure(self, tmp_path, frames_dir):
        out = tmp_path / "out"
        result = CliRunner().invoke(cli, _base_args(tmp_path) + [
            'run', '-i', str(frames_dir), '-p', '*.png', '-o', str(out),
            '--scale', '0.5', '--save-figure'
        ])
        assert result.exit_code == 0, result.output
        assert (out / "f0_summary.png").exists()

    def test_roi_command(self, tmp_path, frames_dir):
        out = tmp_path / "preview"
        result = CliRunner().invoke(cli, _base_args(tmp_path) + [
            'roi', '-i', str(frames_dir), '-p', '*.png', '-o', str(out)
        ])
        assert result.exit_code == 0, result.output
        roi = cv2.imread(str(out / "ROI_mask.png"), cv2.IMREAD_GRAYSCALE)
        golden = cv2.imread(str(out / "golden_image.png"), cv2.IMREAD_GRAYSCALE)
        assert roi.shape == golden.shape
        assert set(np.unique(roi)) <= {0, 255}

    def test_golden_command(self, tmp_path, frames_dir):
        out = tmp_path / "golden"
        result = CliRunner().invoke(cli, _base_args(tmp_path) + [
            'golden', '-i', str(frames_dir), '-p', '*.png', '-o', str(out)
        ])
        assert result.exit_code == 0, result.output
        assert (out / "golden_image.png").exists()

    def test_missing_input_aborts(self, tmp_path):
        result = CliRunner().invoke(cli, _base_args(tmp_path) + [
            'run', '-i', str(tmp_path / "nothing"), '-o', str(tmp_path / "out")
        ])
        assert result.exit_code != 0
        assert "Pipeline failed" in result.output

    def test_empty_input_aborts(self, tmp_path, frames_dir):
        result = CliRunner().invoke(cli, _base_args(tmp_path) + [
            'run', '-i', str(frames_dir), '-p', '*.tif', '-o', str(tmp_path / "out")
        ])
        assert result.exit_code != 0

    def test_invalid_override_aborts(self, tmp_path, frames_dir):
        result = CliRunner().invoke(cli, _base_args(tmp_path) + [
            'run', '-i', str(frames_dir), '--diff-threshold', '999'
        ])
        assert result.exit_code != 0

    def test_info(self, tmp_path):
        result = CliRunner().invoke(cli, _base_args(tmp_path) + ['info'])
        assert result.exit_code == 0, result.output
        assert "Golden sample count" in result.output


class TestCliFailureIsolation:
    """A flat frame fails alone in every command."""

    @pytest.fixture
    def frames_with_flat(self, frames_dir):
        cv2.imwrite(str(frames_dir / "f4.png"), np.zeros((100, 100, 3), dtype=np.uint8))
        return frames_dir

    @pytest.mark.parametrize("command, artifact", [
        ('golden', "golden_image.png"),
        ('roi', "ROI_mask.png"),
        ('run', "report.json"),
    ])
    def test_flat_frame_does_not_abort(self, tmp_path, frames_with_flat, command, artifact):
        out = tmp_path / command
        result = CliRunner().invoke(cli, _base_args(tmp_path) + [
            command, '-i', str(frames_with_flat), '-p', '*.png', '-o', str(out)
        ])
        assert result.exit_code == 0, result.output
        assert (out / artifact).exists()
        assert "f4.png: FAILED" in result.output

    def test_golden_and_roi_agree_with_run(self, tmp_path, frames_with_flat):
        runner = CliRunner()
        for command in ('run', 'roi'):
            result = runner.invoke(cli, _base_args(tmp_path) + [
                command, '-i', str(frames_with_flat), '-p', '*.png', '-o', str(tmp_path / command)
            ])
            assert result.exit_code == 0, result.output

        for name in ("golden_image.png", "ROI_mask.png"):
            from_run = cv2.imread(str(tmp_path / "run" / name), cv2.IMREAD_GRAYSCALE)
            from_roi = cv2.imread(str(tmp_path / "roi" / name), cv2.IMREAD_GRAYSCALE)
            np.testing.assert_array_equal(from_run, from_roi)
