#!/usr/bin/env python3

"""
Main pipeline class for ORF candidate selection.

Sequences base-frequency computation, training set curation, model training,
six-frame scoring, evidence parsing, selection and final output generation.
Checkpointed stages are skipped on reruns.
"""

import os
import logging
from typing import Optional

from .config import PipelineConfig
from .data_structures import EvidenceSets, PipelineResult, RunPaths, RunStatus, checkpoint_for
from .exceptions import PipelineError, PreconditionError, StageError
from .generators import OutputGenerator
from .parsers import DomainHitParser, HomologyHitParser, SequenceHandler
from .processors import CandidateSelector, TrainingSetCurator
from .runner import StageRunner, ToolResolver
from ..utils.performance_monitor import PerformanceMonitor


class OrfSelectionPipeline:
    """Main pipeline class that coordinates all stages."""

    # Tools every run needs; the clustering tool is only needed while curation is pending.
    REQUIRED_TOOLS = (
        "train",
        "score",
        "index_gff3",
        "project",
        "remove_eclipsed",
        "gff3_to_bed",
        "gff3_to_proteins",
    )

    def __init__(self, config: PipelineConfig,
                 resolver: Optional[ToolResolver] = None,
                 monitor: Optional[PerformanceMonitor] = None):
        self.config = config
        self.resolver = resolver or ToolResolver(
            search_dirs=[config.util_dir] if config.util_dir else [],
            overrides=config.tool_paths,
        )
        self.monitor = monitor or PerformanceMonitor()
        self.paths: Optional[RunPaths] = None
        self.runner: Optional[StageRunner] = None
        self.retained_count = 0

    def run(self, transcripts_file: str, output_dir: str = ".") -> PipelineResult:
        """
        Run the complete selection pipeline.

        Args:
            transcripts_file: Path to the transcripts FASTA the candidates were enumerated from
            output_dir: Directory holding the working directory and receiving final outputs

        Returns:
            PipelineResult describing success or the kind of failure
        """
        self.runner = None
        self.retained_count = 0
        file_handler = self._setup_pipeline_logging()
        try:
            logging.info("Starting ORF selection pipeline")
            logging.info(f"Transcripts: {transcripts_file}")
            logging.info(f"Configuration: {self.config}")

            self.paths = RunPaths.build(transcripts_file, output_dir, self.config)
            self._check_preconditions()
            self.runner = StageRunner(self.resolver, self.monitor)

            self._compute_base_frequencies()
            training_file = TrainingSetCurator(self.runner, self.paths, self.config).curate()
            self._train_model(training_file)
            self._score_candidates()
            evidence = self._parse_evidence()
            self._select_candidates(evidence)
            self._index_annotations()
            self._project_selection()
            self._remove_eclipsed()
            OutputGenerator(self.runner, self.paths).generate_outputs()

            logging.info("Pipeline completed successfully")
            self.monitor.log_performance_report()
            return self._result(RunStatus.SUCCESS)

        except PreconditionError as e:
            logging.error(f"Precondition failed: {e}")
            return self._result(RunStatus.PRECONDITION_FAILED, str(e))
        except StageError as e:
            logging.error(str(e))
            return self._result(RunStatus.STAGE_FAILED, str(e),
                                failed_stage=e.stage_name, returncode=e.returncode)
        except (PipelineError, OSError) as e:
            logging.error(f"Pipeline failed: {e}")
            logging.debug("Full traceback:", exc_info=True)
            return self._result(RunStatus.FAILED, str(e))
        finally:
            if file_handler:
                logging.getLogger().removeHandler(file_handler)
                file_handler.close()

    def _setup_pipeline_logging(self) -> Optional[logging.Handler]:
        """Attach the optional log file handler."""
        root_logger = logging.getLogger()
        if self.config.debug_mode:
            root_logger.setLevel(logging.DEBUG)

        if not self.config.log_file:
            return None

        file_handler = logging.FileHandler(self.config.log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        ))
        root_logger.addHandler(file_handler)
        return file_handler

    def _result(self, status: RunStatus, message: str = "", **kwargs) -> PipelineResult:
        return PipelineResult(
            status=status,
            message=message,
            executed_stages=list(self.runner.executed_stages) if self.runner else [],
            skipped_stages=list(self.runner.skipped_stages) if self.runner else [],
            retained_count=self.retained_count,
            **kwargs
        )

    def _check_preconditions(self) -> None:
        """Fail before any stage runs if an input, directory or tool is missing."""
        paths = self.paths
        if not os.path.isfile(paths.transcripts):
            raise PreconditionError("Cannot locate transcripts file", paths.transcripts)

        if not os.path.isdir(paths.work_dir):
            raise PreconditionError(
                "Cannot locate working directory; run the ORF enumeration stage first", paths.work_dir)

        for input_file in paths.required_inputs:
            if not os.path.isfile(input_file):
                raise PreconditionError("Cannot locate candidate file", input_file)

        if self.config.pfam_hits and not os.path.isfile(self.config.pfam_hits):
            raise PreconditionError("Cannot locate domain hits file", self.config.pfam_hits)
        if self.config.blastp_hits and not os.path.isfile(self.config.blastp_hits):
            raise PreconditionError("Cannot locate homology hits file", self.config.blastp_hits)

        if not paths.curated_training:
            TrainingSetCurator.validate_training_file(paths.training_cds)

        tools = list(self.REQUIRED_TOOLS)
        if paths.curated_training and not os.path.exists(checkpoint_for(paths.training_cds)):
            tools.append("cluster")
        self.resolver.resolve_all(tools)

    def _compute_base_frequencies(self) -> None:
        paths = self.paths

        def action():
            counts = SequenceHandler(paths.transcripts).base_counts(self.config.count_both_strands)
            total = sum(counts.values())
            with open(paths.base_freqs, 'w') as f:
                for base in 'ACGT':
                    ratio = counts[base] / total if total else 0.0
                    f.write(f"{base}\t{counts[base]}\t{ratio:.3f}\n")

        self.runner.run("base_frequencies", checkpoint_for(paths.base_freqs), action)

    def _train_model(self, training_file: str) -> None:
        paths = self.paths
        self.runner.run(
            "train_model", checkpoint_for(paths.hexamer_scores),
            lambda: self.runner.run_tool("train", [training_file, paths.base_freqs],
                                         stdout_path=paths.hexamer_scores),
        )

    def _score_candidates(self) -> None:
        paths = self.paths
        self.runner.run(
            "score_candidates", checkpoint_for(paths.cds_scores),
            lambda: self.runner.run_tool("score", [paths.cds, paths.hexamer_scores],
                                         stdout_path=paths.cds_scores),
        )

    def _parse_evidence(self) -> EvidenceSets:
        domain = frozenset()
        homology = frozenset()
        if self.config.pfam_hits:
            domain = DomainHitParser(self.config.pfam_hits,
                                     self.config.domain_accession_column).parse()
        if self.config.blastp_hits:
            homology = HomologyHitParser(self.config.blastp_hits,
                                         self.config.homology_accession_column).parse()
        evidence = EvidenceSets(domain=domain, homology=homology)
        logging.info(f"{len(evidence)} candidates have domain or homology evidence")
        return evidence

    def _select_candidates(self, evidence: EvidenceSets) -> None:
        selector = CandidateSelector(self.config.retain_long_orfs, evidence, self.config.verbose)

        def action():
            self.retained_count = selector.write_selection(self.paths.cds_scores, self.paths.selected)

        self.runner.run("select_candidates", None, action)

    def _index_annotations(self) -> None:
        paths = self.paths
        self.runner.run(
            "index_annotations", checkpoint_for(paths.gff3_index),
            lambda: self.runner.run_tool("index_gff3", [paths.gff3]),
        )

    def _project_selection(self) -> None:
        paths = self.paths
        self.runner.run(
            "project_selection", None,
            lambda: self.runner.run_tool("project", [paths.selected, paths.gff3_index],
                                         stdout_path=paths.best_candidates_gff3),
        )

    def _remove_eclipsed(self) -> None:
        paths = self.paths
        self.runner.run(
            "remove_eclipsed", None,
            lambda: self.runner.run_tool("remove_eclipsed", [paths.best_candidates_gff3],
                                         stdout_path=paths.eclipsed_removed_gff3),
        )
