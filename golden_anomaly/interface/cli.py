"""
Command Line Interface for the anomaly detection system.
Runs the pipeline over a directory of frames and writes its artifacts.
"""

from pathlib import Path

import click
import cv2

from ..data import ImageLoader, ResultWriter
from ..detection import PipelineVisualizer
from ..pipeline import InspectionPipeline
from ..utils import ConfigManager, AnomalyDetectionError, setup_logging


def _load_frames(config: ConfigManager, input_dir, pattern):
    paths = config.get_paths_config()
    loader = ImageLoader(input_dir or paths.input_dir, pattern or paths.input_pattern)
    return loader.load().validate()


def _writer(config: ConfigManager, output_dir) -> ResultWriter:
    paths = config.get_paths_config()
    if output_dir:
        return ResultWriter(output_dir, Path(output_dir) / "Masks")
    return ResultWriter(paths.output_dir, paths.masks_dir)


def _reference(config: ConfigManager, image_set, extract_roi: bool):
    pipeline = InspectionPipeline.from_config(config)
    report = pipeline.build_reference(image_set, extract_roi=extract_roi)
    for frame in report.failed:
        click.echo(f"{frame.frame_id}: FAILED ({frame.error})", err=True)
    return report


@click.group()
@click.option('--config', '-c', type=click.Path(), default='config/config.yaml',
              help='Configuration file path')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              default='INFO', help='Logging level')
@click.option('--log-to-file', is_flag=True, help='Also write rotating log files')
@click.pass_context
def cli(ctx, config, log_level, log_to_file):
    """Golden-image anomaly detection CLI"""
    ctx.ensure_object(dict)

    setup_logging(config, level=log_level, file_logging=log_to_file or None)

    try:
        config_manager = ConfigManager(config if Path(config).exists() else None)
    except AnomalyDetectionError as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise click.Abort()
    ctx.obj['config_manager'] = config_manager


input_options = [
    click.option('--input-dir', '-i', type=click.Path(), help='Directory holding input frames'),
    click.option('--pattern', '-p', help='Glob pattern selecting input frames'),
    click.option('--output-dir', '-o', type=click.Path(), help='Directory for results'),
]


def with_input_options(func):
    for option in reversed(input_options):
        func = option(func)
    return func


@cli.command()
@with_input_options
@click.option('--scale', type=float, help='Preprocessing scale factor')
@click.option('--samples', type=int, help='Number of frames averaged into the golden image (-1 for all)')
@click.option('--diff-threshold', type=int, help='Anomaly difference threshold')
@click.option('--roi-threshold', type=int, help='ROI binarization threshold')
@click.option('--workers', type=int, help='Number of worker threads')
@click.option('--save-figure', is_flag=True, help='Save a summary figure per frame')
@click.pass_context
def run(ctx, input_dir, pattern, output_dir, scale, samples, diff_threshold, roi_threshold, workers, save_figure):
    """Run the full pipeline and write golden image, ROI mask and masks"""
    config_manager = ctx.obj['config_manager']

    try:
        # Override config with CLI arguments
        if scale is not None:
            config_manager.set('preprocessing.scale_factor', scale)
        if samples is not None:
            config_manager.set('golden_image.sample_count', samples)
        if diff_threshold is not None:
            config_manager.set('anomaly.difference_threshold', diff_threshold)
        if roi_threshold is not None:
            config_manager.set('roi.binarization_threshold', roi_threshold)
        if workers is not None:
            config_manager.set('pipeline.num_workers', workers)

        image_set = _load_frames(config_manager, input_dir, pattern)
        click.echo(f"Processing {len(image_set)} images...")

        pipeline = InspectionPipeline.from_config(config_manager, show_progress=True)
        report = pipeline.run(image_set)

        writer = _writer(config_manager, output_dir)
        written = writer.write_report(report)

        for frame in report.frames:
            if frame.succeeded:
                click.echo(f"{frame.frame_id}: {len(frame.regions)} regions")
            elif frame.error is not None:
                click.echo(f"{frame.frame_id}: FAILED ({frame.error})", err=True)
            else:
                click.echo(f"{frame.frame_id}: SKIPPED", err=True)

        if save_figure:
            visualizer = PipelineVisualizer()
            for frame in report.succeeded:
                save_path = writer.output_dir / f"{Path(frame.frame_id).stem}_summary.png"
                visualizer.plot_summary(
                    report.golden_image,
                    report.roi_mask,
                    image_set[frame.index].pixels,
                    frame.final_mask,
                    regions=frame.regions,
                    title=frame.frame_id,
                    save_path=save_path
                )
                visualizer.close_all_plots()

        click.echo(f"Summary saved to: {written['summary']}")
        click.echo(f"Completed: {len(report.succeeded)} succeeded, {len(report.failed)} failed")

    except AnomalyDetectionError as e:
        click.echo(f"Pipeline failed: {e}", err=True)
        raise click.Abort()


@cli.command()
@with_input_options
@click.pass_context
def golden(ctx, input_dir, pattern, output_dir):
    """Write only the golden image"""
    config_manager = ctx.obj['config_manager']

    try:
        image_set = _load_frames(config_manager, input_dir, pattern)
        report = _reference(config_manager, image_set, extract_roi=False)
        path = _writer(config_manager, output_dir).write_golden_image(report.golden_image)
        click.echo(f"Golden image saved to: {path}")
    except AnomalyDetectionError as e:
        click.echo(f"Golden image failed: {e}", err=True)
        raise click.Abort()


@cli.command()
@with_input_options
@click.pass_context
def roi(ctx, input_dir, pattern, output_dir):
    """Write the golden image and the ROI mask"""
    config_manager = ctx.obj['config_manager']

    try:
        image_set = _load_frames(config_manager, input_dir, pattern)
        report = _reference(config_manager, image_set, extract_roi=True)

        writer = _writer(config_manager, output_dir)
        writer.write_golden_image(report.golden_image)
        path = writer.write_roi_mask(report.roi_mask)
        click.echo(f"ROI mask saved to: {path}")
    except AnomalyDetectionError as e:
        click.echo(f"ROI extraction failed: {e}", err=True)
        raise click.Abort()


@cli.command()
@click.pass_context
def info(ctx):
    """Show configuration and discovered inputs"""
    config_manager = ctx.obj['config_manager']
    paths = config_manager.get_paths_config()

    click.echo("=== Golden-Image Anomaly Detection ===")
    click.echo(f"OpenCV version: {cv2.__version__}")
    click.echo(f"Input directory: {paths.input_dir} ({paths.input_pattern})")
    click.echo(f"Output directory: {paths.output_dir}")
    click.echo(f"Masks directory: {paths.masks_dir}")

    pre = config_manager.get_preprocessing_config()
    roi_config = config_manager.get_roi_config()
    click.echo(f"\nScale factor: {pre.scale_factor}")
    click.echo(f"Golden sample count: {config_manager.get('golden_image.sample_count')}")
    click.echo(f"ROI policy: {roi_config.policy}")
    click.echo(f"Difference threshold: {config_manager.get('anomaly.difference_threshold')}")

    input_dir = Path(paths.input_dir)
    if input_dir.is_dir():
        count = len(list(input_dir.glob(paths.input_pattern)))
        click.echo(f"\nInput images: {count}")
    else:
        click.echo("\nInput directory not found!")


if __name__ == '__main__':
    cli()
