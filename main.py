"""
Main entry point for the golden-image anomaly detection CLI.

Reads the frames of a directory, synthesizes a golden image, derives the grid
ROI and writes one anomaly mask per frame. For example:

  # Full run with the paths from config/config.yaml
  python main.py run

  # Full run on another directory, averaging all frames
  python main.py run --input-dir data/frames --pattern "*.png" --samples -1

  # Only write the golden image and ROI mask
  python main.py roi --output-dir out

For more information on available commands and options, run:
  python main.py --help
"""

from golden_anomaly.interface import cli

if __name__ == '__main__':
    cli()
