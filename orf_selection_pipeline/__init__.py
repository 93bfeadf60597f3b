#!/usr/bin/env python3

"""
ORF Selection Pipeline

Selects likely protein-coding ORFs from transcript-derived candidates using a
trained coding-likelihood model plus optional domain and homology evidence.

Modules:
- core: data structures, exceptions, configuration, parsers, selection,
  stage execution and the pipeline itself
- utils: performance monitoring
- tests: unit test suite
"""

__version__ = "1.0.0"

from .core.data_structures import (
    ScoreRecord, EvidenceSets, RunPaths, RunStatus, PipelineResult
)
from .core.exceptions import (
    PipelineError, ConfigurationError, PreconditionError, ToolNotFoundError,
    ParseError, StageError
)
from .core.config import PipelineConfig, load_config
from .core.pipeline import OrfSelectionPipeline

__all__ = [
    # Main pipeline
    'OrfSelectionPipeline',
    # Data structures
    'ScoreRecord', 'EvidenceSets', 'RunPaths', 'RunStatus', 'PipelineResult',
    # Exceptions
    'PipelineError', 'ConfigurationError', 'PreconditionError', 'ToolNotFoundError',
    'ParseError', 'StageError',
    # Configuration
    'PipelineConfig', 'load_config'
]
