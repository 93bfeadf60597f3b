#!/usr/bin/env python3

"""
Configuration management for the ORF selection pipeline.

Centralized configuration with support for file-based configuration
and environment variable overrides.
"""

import os
import json
from dataclasses import dataclass, asdict, field
from typing import Optional, Dict, Any

import yaml

from .exceptions import ConfigurationError


# Column of the query name in an hmmscan --domtblout report (HMMER 3.x):
# target name, target accession, tlen, query name, ...
DOMTBLOUT_QUERY_COLUMN = 4

# Column of the query id in BLAST/DIAMOND tabular output (-outfmt 6).
BLAST_TABULAR_QUERY_COLUMN = 1


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes')


def read_config_file(config_path: str) -> Dict[str, Any]:
    """Read the raw mapping from a JSON or YAML configuration file."""
    if not os.path.exists(config_path):
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            if config_path.lower().endswith(('.yaml', '.yml')):
                config_data = yaml.safe_load(f) or {}
            else:
                config_data = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Invalid configuration file format: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}")

    if not isinstance(config_data, dict):
        raise ConfigurationError(
            f"Expected a mapping at the top level of {config_path}, got {type(config_data).__name__}"
        )
    return config_data


@dataclass
class PipelineConfig:
    """Centralized configuration for the ORF selection pipeline."""

    # Selection
    retain_long_orfs: int = 900
    pfam_hits: Optional[str] = None
    blastp_hits: Optional[str] = None
    domain_accession_column: int = DOMTBLOUT_QUERY_COLUMN
    homology_accession_column: int = BLAST_TABULAR_QUERY_COLUMN

    # Training set curation
    top_orfs_train: int = 500
    prefilter_factor: int = 10
    cluster_identity: float = 0.80
    cluster_memory_mb: int = 0  # 0 = no limit
    train_file: Optional[str] = None
    count_both_strands: bool = False

    # External tools
    cpu: int = 1
    util_dir: Optional[str] = None
    tool_paths: Dict[str, str] = field(default_factory=dict)

    # Naming
    pipeline_tag: str = "transdecoder"

    # Diagnostics
    verbose: bool = False
    debug_mode: bool = False
    log_file: Optional[str] = None

    @classmethod
    def from_file(cls, config_path: str) -> 'PipelineConfig':
        """Load configuration from file (JSON or YAML)."""
        return cls.from_dict(read_config_file(config_path))

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'PipelineConfig':
        """Create configuration from dictionary."""
        # Filter out unknown keys
        known_keys = set(cls.__dataclass_fields__.keys())
        filtered_dict = {k: v for k, v in config_dict.items() if k in known_keys}

        try:
            return cls(**filtered_dict)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration parameters: {e}")

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Load configuration from environment variables."""
        config = cls()

        env_mappings = {
            'ORF_PIPELINE_RETAIN_LONG_ORFS': ('retain_long_orfs', int),
            'ORF_PIPELINE_TOP_ORFS_TRAIN': ('top_orfs_train', int),
            'ORF_PIPELINE_CLUSTER_IDENTITY': ('cluster_identity', float),
            'ORF_PIPELINE_CPU': ('cpu', int),
            'ORF_PIPELINE_UTIL_DIR': ('util_dir', str),
            'ORF_PIPELINE_VERBOSE': ('verbose', _parse_bool),
            'ORF_PIPELINE_DEBUG_MODE': ('debug_mode', _parse_bool),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                try:
                    setattr(config, field_name, converter(env_value))
                except (ValueError, TypeError) as e:
                    raise ConfigurationError(f"Invalid environment variable {env_var}: {e}")

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to file."""
        config_dict = self.to_dict()

        try:
            with open(config_path, 'w') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    yaml.safe_dump(config_dict, f, default_flow_style=False)
                else:
                    json.dump(config_dict, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration: {e}")

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.retain_long_orfs < 0:
            raise ConfigurationError("retain_long_orfs must be >= 0")

        if self.top_orfs_train < 1:
            raise ConfigurationError("top_orfs_train must be >= 1")

        if self.prefilter_factor < 1:
            raise ConfigurationError("prefilter_factor must be >= 1")

        if not 0 < self.cluster_identity <= 1:
            raise ConfigurationError("cluster_identity must be in (0, 1]")

        if self.cluster_memory_mb < 0:
            raise ConfigurationError("cluster_memory_mb must be >= 0")

        if self.cpu < 1:
            raise ConfigurationError("cpu must be >= 1")

        if self.domain_accession_column < 1 or self.homology_accession_column < 1:
            raise ConfigurationError("evidence accession columns are 1-based and must be >= 1")

        if not self.pipeline_tag:
            raise ConfigurationError("pipeline_tag must not be empty")

        if not isinstance(self.tool_paths, dict):
            raise ConfigurationError("tool_paths must be a mapping of tool name to executable")

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()


def load_config(config_path: Optional[str] = None,
                use_env: bool = True) -> PipelineConfig:
    """
    Load configuration with priority: file > environment > defaults.

    Args:
        config_path: Path to configuration file (optional)
        use_env: Whether to load environment variables

    Returns:
        PipelineConfig: Loaded configuration
    """
    config = PipelineConfig()

    if use_env:
        env_config = PipelineConfig.from_env()
        for field_name in PipelineConfig.__dataclass_fields__:
            env_value = getattr(env_config, field_name)
            if env_value != getattr(config, field_name):
                setattr(config, field_name, env_value)

    if config_path:
        file_data = read_config_file(config_path)
        file_config = PipelineConfig.from_dict(file_data)
        # Only keys the file sets; the rest keep their environment or default value
        for field_name in PipelineConfig.__dataclass_fields__:
            if field_name in file_data:
                setattr(config, field_name, getattr(file_config, field_name))
        config.validate()

    return config
