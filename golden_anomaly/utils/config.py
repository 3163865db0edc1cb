"""
Configuration management utilities with validation and type safety.
Every tunable constant of the pipeline is a named, range-checked field.
"""

import math
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Optional, Union
import yaml
from omegaconf import OmegaConf, DictConfig

from .exceptions import ConfigurationError
from .logger import LoggerMixin


@dataclass
class PreprocessingConfig:
    """Preprocessing configuration parameters."""
    scale_factor: float = 0.125
    target_size: list = field(default_factory=lambda: [0, 0])
    interpolation: str = "cubic"
    auto_contrast: bool = True


@dataclass
class GoldenImageConfig:
    """Golden image synthesis parameters."""
    sample_count: int = 4


@dataclass
class ROIConfig:
    """Region-of-interest extraction parameters."""
    blur_kernel_size: int = 15
    canny_low: float = 12
    canny_high: float = 24
    hough_rho: float = 1.0
    hough_theta: float = math.pi / 180
    hough_threshold: int = 50
    hough_min_line_length: float = 5
    hough_max_line_gap: float = 50
    line_thickness: int = 1
    morphology_iterations: int = 7
    binarization_threshold: int = 125
    policy: str = "exclude_structure"


@dataclass
class AnomalyConfig:
    """Anomaly masking parameters."""
    difference_threshold: int = 32
    speckle_iterations: int = 0
    min_region_area: int = 1


@dataclass
class PipelineConfig:
    """Pipeline execution parameters."""
    num_workers: int = 4


@dataclass
class PathsConfig:
    """Input/output locations used by the I/O layer."""
    input_dir: str = "Images/Input"
    input_pattern: str = "*hr.bmp"
    output_dir: str = "Images/Output"
    masks_dir: str = "Images/Output/Masks"


INTERPOLATION_MODES = ("nearest", "linear", "cubic", "area", "lanczos")
ROI_POLICIES = ("exclude_structure", "include_structure")


def _default_config_dict() -> dict:
    return {
        "project": {
            "name": "golden_anomaly",
            "version": "1.0.0",
            "description": "Golden-image anomaly detection restricted to an automatic grid ROI"
        },
        "preprocessing": asdict(PreprocessingConfig()),
        "golden_image": asdict(GoldenImageConfig()),
        "roi": asdict(ROIConfig()),
        "anomaly": asdict(AnomalyConfig()),
        "pipeline": asdict(PipelineConfig()),
        "paths": asdict(PathsConfig()),
        "logging": {
            "level": "INFO",
            "log_dir": "logs",
            "file_logging": False
        }
    }


class ConfigManager(LoggerMixin):
    """
    Configuration manager with validation and type safety.
    Loads YAML through OmegaConf and merges it over the built-in defaults.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None, overrides: Optional[dict] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional YAML file; searched for when omitted
            overrides: Nested dictionary merged on top of the file values
        """
        self._config = self._load_config(config_path)
        if overrides:
            self._config = OmegaConf.merge(self._config, OmegaConf.create(overrides))
        self.validate()

    def _load_config(self, config_path: Optional[Union[str, Path]]) -> DictConfig:
        """Load configuration, falling back to defaults."""
        defaults = OmegaConf.create(_default_config_dict())

        if config_path is None:
            config_path = self._find_config_file()

        if config_path and Path(config_path).exists():
            try:
                with open(config_path, 'r') as f:
                    config_dict = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(
                    f"Failed to read configuration: {e}",
                    context={"path": str(config_path)}
                ) from e
            self.logger.info(f"Loaded configuration from {config_path}")
            return OmegaConf.merge(defaults, OmegaConf.create(config_dict))

        self.logger.debug("Using default configuration")
        return defaults

    def _find_config_file(self) -> Optional[Path]:
        """Find configuration file in common locations."""
        search_paths = [
            Path("config/config.yaml"),
            Path("config.yaml"),
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def validate(self):
        """Validate configuration parameters."""
        try:
            pre = self._config.preprocessing
            assert len(pre.target_size) == 2, "target_size must be [width, height]"
            assert all(v >= 0 for v in pre.target_size), "target_size must be non-negative"
            assert 0 <= pre.scale_factor <= 1, "scale_factor must be in [0, 1]"
            uses_target = tuple(pre.target_size) != (0, 0)
            assert (pre.scale_factor > 0) != uses_target, \
                "exactly one of scale_factor and target_size must be set"
            assert pre.interpolation in INTERPOLATION_MODES, \
                f"interpolation must be one of {INTERPOLATION_MODES}"

            count = self._config.golden_image.sample_count
            assert count == -1 or count >= 1, "sample_count must be -1 or at least 1"

            roi = self._config.roi
            assert roi.blur_kernel_size >= 1, "blur_kernel_size must be at least 1"
            assert 0 <= roi.canny_low <= roi.canny_high, "canny thresholds must satisfy 0 <= low <= high"
            assert roi.hough_rho > 0, "hough_rho must be positive"
            assert 0 < roi.hough_theta <= math.pi, "hough_theta must be in (0, pi]"
            assert roi.hough_threshold >= 1, "hough_threshold must be at least 1"
            assert roi.hough_min_line_length >= 0, "hough_min_line_length must be non-negative"
            assert roi.hough_max_line_gap >= 0, "hough_max_line_gap must be non-negative"
            assert roi.line_thickness >= 1, "line_thickness must be at least 1"
            assert roi.morphology_iterations >= 1, "morphology_iterations must be at least 1"
            assert 0 <= roi.binarization_threshold <= 255, "binarization_threshold must be in [0, 255]"
            assert roi.policy in ROI_POLICIES, f"policy must be one of {ROI_POLICIES}"

            anomaly = self._config.anomaly
            assert 0 <= anomaly.difference_threshold <= 255, "difference_threshold must be in [0, 255]"
            assert anomaly.speckle_iterations >= 0, "speckle_iterations must be non-negative"
            assert anomaly.min_region_area >= 0, "min_region_area must be non-negative"

            assert self._config.pipeline.num_workers >= 1, "num_workers must be at least 1"

            self.logger.debug("Configuration validation passed")

        except AssertionError as e:
            self.logger.error(f"Configuration validation failed: {e}")
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @property
    def config(self) -> DictConfig:
        """Get configuration object."""
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dotted key."""
        return OmegaConf.select(self._config, key, default=default)

    def set(self, key: str, value: Any):
        """Set configuration value by dotted key and re-validate."""
        OmegaConf.update(self._config, key, value)
        self.validate()

    def save(self, path: Union[str, Path]):
        """Save configuration to file."""
        with open(path, 'w') as f:
            OmegaConf.save(self._config, f)
        self.logger.info(f"Configuration saved to {path}")

    def get_preprocessing_config(self) -> PreprocessingConfig:
        """Get typed preprocessing configuration."""
        return PreprocessingConfig(**OmegaConf.to_container(self._config.preprocessing))

    def get_golden_config(self) -> GoldenImageConfig:
        """Get typed golden image configuration."""
        return GoldenImageConfig(**OmegaConf.to_container(self._config.golden_image))

    def get_roi_config(self) -> ROIConfig:
        """Get typed ROI configuration."""
        return ROIConfig(**OmegaConf.to_container(self._config.roi))

    def get_anomaly_config(self) -> AnomalyConfig:
        """Get typed anomaly configuration."""
        return AnomalyConfig(**OmegaConf.to_container(self._config.anomaly))

    def get_pipeline_config(self) -> PipelineConfig:
        """Get typed pipeline configuration."""
        return PipelineConfig(**OmegaConf.to_container(self._config.pipeline))

    def get_paths_config(self) -> PathsConfig:
        """Get typed paths configuration."""
        return PathsConfig(**OmegaConf.to_container(self._config.paths))
