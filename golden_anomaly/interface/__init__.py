"""
Interface package for the anomaly detection system.
Provides the command-line interface.
"""

from .cli import cli

__all__ = [
    'cli'
]
