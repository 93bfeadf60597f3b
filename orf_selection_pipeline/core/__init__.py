#!/usr/bin/env python3

"""
Core module for the ORF selection pipeline.

Contains fundamental data structures, exception types, and configuration
management components.
"""

from .data_structures import ScoreRecord, EvidenceSets, RunPaths, RunStatus, PipelineResult
from .exceptions import (
    PipelineError, ConfigurationError, PreconditionError, ToolNotFoundError,
    ParseError, StageError
)
from .config import PipelineConfig, load_config

__all__ = [
    'ScoreRecord', 'EvidenceSets', 'RunPaths', 'RunStatus', 'PipelineResult',
    'PipelineError', 'ConfigurationError', 'PreconditionError', 'ToolNotFoundError',
    'ParseError', 'StageError',
    'PipelineConfig', 'load_config'
]
