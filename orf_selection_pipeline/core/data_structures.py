#!/usr/bin/env python3

"""
Core data structures for the ORF selection pipeline.

Defines the scored candidate record, the evidence sets, the per-run path
record and the result returned by a pipeline run.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Sequence


CHECKPOINT_SUFFIX = ".ok"


def checkpoint_for(path: str) -> str:
    """Return the sentinel path marking that the stage producing `path` completed."""
    return path + CHECKPOINT_SUFFIX


@dataclass(frozen=True)
class ScoreRecord:
    """One row of the six-frame scores table."""
    accession: str
    length: int
    frame_scores: Sequence[float]

    def __post_init__(self):
        if not self.accession:
            raise ValueError("Score record requires an accession")
        if self.length < 0:
            raise ValueError(f"Invalid ORF length for {self.accession}: {self.length}")
        if not self.frame_scores:
            raise ValueError(f"No frame scores for {self.accession}")

    @property
    def own_frame_score(self) -> float:
        """Score of the frame the ORF was called in."""
        return self.frame_scores[0]

    @property
    def max_other_frame_score(self) -> float:
        """Best score among the competing frames (-inf when none were scored)."""
        others = self.frame_scores[1:]
        if not others:
            return float('-inf')
        return max(others)


@dataclass(frozen=True)
class EvidenceSets:
    """Accessions with domain or homology support."""
    domain: FrozenSet[str] = frozenset()
    homology: FrozenSet[str] = frozenset()

    def __len__(self) -> int:
        return len(self.domain | self.homology)


@dataclass(frozen=True)
class RunPaths:
    """Every file a run reads or writes, derived once from the transcripts file name."""
    transcripts: str
    output_dir: str
    work_dir: str
    cds: str
    gff3: str
    pep: str
    base_freqs: str
    prefilter_cds: str
    nonredundant_cds: str
    training_cds: str
    curated_training: bool
    hexamer_scores: str
    cds_scores: str
    selected: str
    gff3_index: str
    best_candidates_gff3: str
    eclipsed_removed_gff3: str
    final_prefix: str

    @classmethod
    def build(cls, transcripts_file: str, output_dir: str, config) -> 'RunPaths':
        """Derive all run paths from the transcripts file and configuration."""
        base = os.path.basename(transcripts_file)
        work_dir = os.path.join(output_dir, f"{base}.{config.pipeline_tag}_dir")
        prefix = os.path.join(work_dir, "longest_orfs")
        cds = f"{prefix}.cds"

        prefilter_count = config.top_orfs_train * config.prefilter_factor
        prefilter_cds = f"{cds}.top_longest_{prefilter_count}"
        identity_pct = int(round(config.cluster_identity * 100))

        if config.train_file:
            training_cds = config.train_file
            curated = False
        else:
            training_cds = f"{cds}.top_{config.top_orfs_train}_longest"
            curated = True

        return cls(
            transcripts=transcripts_file,
            output_dir=output_dir,
            work_dir=work_dir,
            cds=cds,
            gff3=f"{prefix}.gff3",
            pep=f"{prefix}.pep",
            base_freqs=os.path.join(work_dir, "base_freqs.dat"),
            prefilter_cds=prefilter_cds,
            nonredundant_cds=f"{prefilter_cds}.nr{identity_pct}",
            training_cds=training_cds,
            curated_training=curated,
            hexamer_scores=os.path.join(work_dir, "hexamer.scores"),
            cds_scores=f"{cds}.scores",
            selected=f"{cds}.scores.selected",
            gff3_index=f"{prefix}.gff3.inx",
            best_candidates_gff3=f"{cds}.best_candidates.gff3",
            eclipsed_removed_gff3=f"{cds}.best_candidates.eclipsed_orfs_removed.gff3",
            final_prefix=os.path.join(output_dir, f"{base}.{config.pipeline_tag}"),
        )

    @property
    def required_inputs(self) -> List[str]:
        """Files the upstream enumeration stage must have produced."""
        return [self.cds, self.gff3, self.pep]

    def final_output(self, extension: str) -> str:
        """Path of a final output, e.g. final_output('gff3')."""
        return f"{self.final_prefix}.{extension}"


class RunStatus(Enum):
    """Outcome category of a pipeline run."""
    SUCCESS = "success"
    PRECONDITION_FAILED = "precondition_failed"
    STAGE_FAILED = "stage_failed"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Result of a pipeline run; failure kinds are distinguishable without parsing messages."""
    status: RunStatus
    message: str = ""
    failed_stage: Optional[str] = None
    returncode: Optional[int] = None
    executed_stages: List[str] = field(default_factory=list)
    skipped_stages: List[str] = field(default_factory=list)
    retained_count: int = 0

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.SUCCESS

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1
