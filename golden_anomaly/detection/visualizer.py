"""
Visualization of pipeline results.
Shows the golden image, the ROI mask and frame overlays with detected regions.
"""

from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as patches

from ..utils import LoggerMixin, VisualizationError, handle_exceptions
from .regions import AnomalyRegion


class PipelineVisualizer(LoggerMixin):
    """
    Renders summary figures of an inspection run.
    """

    def __init__(
        self,
        figsize: Tuple[int, int] = (15, 5),
        dpi: int = 100,
        overlay_colormap: str = 'autumn',
        bbox_color: str = 'red',
        bbox_thickness: int = 2
    ):
        """
        Initialize visualizer.

        Args:
            figsize: Figure size for plots
            dpi: DPI for saved figures
            overlay_colormap: Colormap for the anomaly overlay
            bbox_color: Color for region bounding boxes
            bbox_thickness: Thickness of bounding box lines
        """
        self.figsize = figsize
        self.dpi = dpi
        self.overlay_colormap = overlay_colormap
        self.bbox_color = bbox_color
        self.bbox_thickness = bbox_thickness

    @handle_exceptions(VisualizationError)
    def plot_summary(
        self,
        golden_image: np.ndarray,
        roi_mask: np.ndarray,
        frame: np.ndarray,
        final_mask: np.ndarray,
        regions: Optional[List[AnomalyRegion]] = None,
        title: Optional[str] = None,
        save_path: Optional[Path] = None
    ) -> plt.Figure:
        """
        Plot golden image, ROI mask and a frame overlaid with its final mask.

        Args:
            golden_image: Golden image (any resolution)
            roi_mask: ROI mask matching the golden image
            frame: Original frame, grayscale or BGR
            final_mask: Final mask at the frame's resolution
            regions: Regions to outline on the overlay
            title: Optional title for the figure
            save_path: Optional path to save figure

        Returns:
            Matplotlib figure
        """
        fig, axes = plt.subplots(1, 3, figsize=self.figsize, dpi=self.dpi)

        axes[0].imshow(golden_image, cmap='gray', vmin=0, vmax=255)
        axes[0].set_title('Golden Image')
        axes[0].axis('off')

        axes[1].imshow(roi_mask, cmap='gray', vmin=0, vmax=255)
        axes[1].set_title('ROI Mask')
        axes[1].axis('off')

        self._draw_overlay(axes[2], frame, final_mask, regions or [])

        if title:
            fig.suptitle(title, fontsize=14, fontweight='bold')
        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=self.dpi, bbox_inches='tight')
            self.logger.info(f"Figure saved to {save_path}")

        return fig

    def _draw_overlay(self, ax, frame: np.ndarray, final_mask: np.ndarray, regions: List[AnomalyRegion]):
        if frame.ndim == 3:
            # BGR -> RGB for matplotlib
            ax.imshow(frame[:, :, ::-1])
        else:
            ax.imshow(frame, cmap='gray', vmin=0, vmax=255)

        overlay = np.ma.masked_where(final_mask == 0, final_mask)
        ax.imshow(overlay, cmap=self.overlay_colormap, alpha=0.6, vmin=0, vmax=255)

        for region in regions:
            x, y, w, h = region.bbox
            ax.add_patch(patches.Rectangle(
                (x, y), w, h,
                linewidth=self.bbox_thickness,
                edgecolor=self.bbox_color,
                facecolor='none'
            ))

        ax.set_title(f'Anomalies ({len(regions)} regions)')
        ax.axis('off')

    def close_all_plots(self):
        """Close all plots to free memory."""
        plt.close('all')
