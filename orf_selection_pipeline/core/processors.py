#!/usr/bin/env python3

"""
Processing classes for training set curation and candidate selection.
"""

import logging
import os
from typing import Iterable, List, Optional

from .config import PipelineConfig
from .data_structures import EvidenceSets, RunPaths, ScoreRecord, checkpoint_for
from .exceptions import PreconditionError
from .parsers import ScoresParser, SequenceHandler
from .runner import StageRunner


class TrainingSetCurator:
    """Derive a bounded, non-redundant, longest-first set of training CDS entries.

    Only the `prefilter_factor * top_orfs_train` longest candidates are
    clustered, so redundancy removal never scans the whole population.
    """

    STAGE_NAME = "training_set"

    def __init__(self, runner: StageRunner, paths: RunPaths, config: PipelineConfig):
        self.runner = runner
        self.paths = paths
        self.config = config

    @staticmethod
    def validate_training_file(file_path: str) -> None:
        """Raise PreconditionError unless `file_path` is a readable, non-empty file."""
        if not os.path.isfile(file_path):
            raise PreconditionError("Cannot locate training file", file_path)
        if not os.access(file_path, os.R_OK):
            raise PreconditionError("Training file is not readable", file_path)
        if os.path.getsize(file_path) == 0:
            raise PreconditionError("Training file is empty", file_path)

    def curate(self) -> str:
        """Return the training file, building it unless an override is configured."""
        if not self.paths.curated_training:
            self.validate_training_file(self.paths.training_cds)
            logging.info(f"Using user-supplied training file: {self.paths.training_cds}")
            return self.paths.training_cds

        self.runner.run(self.STAGE_NAME, checkpoint_for(self.paths.training_cds), self._build)
        return self.paths.training_cds

    def _build(self) -> None:
        target = self.config.top_orfs_train
        prefilter_count = target * self.config.prefilter_factor

        SequenceHandler(self.paths.cds).write_longest(self.paths.prefilter_cds, prefilter_count)

        self.runner.run_tool("cluster", [
            "-r", "1",
            "-i", self.paths.prefilter_cds,
            "-T", str(self.config.cpu),
            "-c", f"{self.config.cluster_identity:.2f}",
            "-o", self.paths.nonredundant_cds,
            "-M", str(self.config.cluster_memory_mb),
        ])

        written = SequenceHandler(self.paths.nonredundant_cds).write_longest(
            self.paths.training_cds, target)
        if written < target:
            logging.info(f"Only {written} non-redundant candidates available; "
                         f"training on all of them (target {target})")


class CandidateSelector:
    """Decide which scored candidates are retained.

    A candidate is kept if it has domain or homology evidence, is at least
    `retain_long_orfs` long, or its own-frame score is positive and beats
    every other frame.
    """

    def __init__(self, retain_long_orfs: int = 900,
                 evidence: Optional[EvidenceSets] = None,
                 verbose: bool = False):
        self.retain_long_orfs = retain_long_orfs
        self.evidence = evidence or EvidenceSets()
        self.verbose = verbose

    def is_retained(self, record: ScoreRecord) -> bool:
        """Apply the retention rule to one scored candidate."""
        if record.accession in self.evidence.domain:
            return True
        if record.accession in self.evidence.homology:
            return True
        if record.length >= self.retain_long_orfs:
            return True
        own = record.own_frame_score
        return own > 0 and own > record.max_other_frame_score

    def select(self, records: Iterable[ScoreRecord]) -> List[str]:
        """Return retained accessions in input order."""
        retained = []
        for record in records:
            if not self.is_retained(record):
                continue
            retained.append(record.accession)
            if self.verbose:
                if record.accession in self.evidence.domain:
                    logging.info(f"{record.accession} retained: domain hit")
                if record.accession in self.evidence.homology:
                    logging.info(f"{record.accession} retained: homology hit")
        return retained

    def write_selection(self, scores_file: str, output_file: str) -> int:
        """Select from a scores table and write one accession per line; return the count."""
        retained = self.select(ScoresParser(scores_file))
        with open(output_file, 'w') as f:
            for accession in retained:
                f.write(f"{accession}\n")
        logging.info(f"Retained {len(retained)} candidates; selection written to {output_file}")
        return len(retained)
