#!/usr/bin/env python3

"""
Command-line interface for the ORF selection pipeline.

Runs after the ORF enumeration stage has created
<transcripts>.transdecoder_dir in the output directory.
"""

import argparse
import sys
import logging

from orf_selection_pipeline.core.config import load_config
from orf_selection_pipeline.core.exceptions import PipelineError


def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Select likely coding ORFs from candidates enumerated on a transcript set",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  python pipeline_cli.py -t transcripts.fasta

  # With domain and homology evidence
  python pipeline_cli.py -t transcripts.fasta --retain_pfam_hits pfam.domtblout --retain_blastp_hits blastp.outfmt6 --cpu 8
        """
    )

    # Required arguments
    parser.add_argument(
        '-t', '--transcripts',
        required=True,
        help='Transcripts FASTA file the candidate ORFs were enumerated from'
    )

    # Selection parameters
    parser.add_argument(
        '--retain_long_orfs',
        type=int,
        help='Retain all ORFs at least this long in nucleotides (default: 900)'
    )
    parser.add_argument(
        '--retain_pfam_hits',
        metavar='DOMTBLOUT',
        help='Domain search output (hmmscan --domtblout); ORFs with hits are retained'
    )
    parser.add_argument(
        '--retain_blastp_hits',
        metavar='OUTFMT6',
        help='Homology search output (blastp -outfmt 6); ORFs with hits are retained'
    )

    # Training parameters
    parser.add_argument(
        '--cpu',
        type=int,
        help='Number of threads for the clustering tool (default: 1)'
    )
    parser.add_argument(
        '--train',
        help='FASTA file of CDS entries to train on instead of the curated longest set'
    )
    parser.add_argument(
        '-T',
        dest='top_orfs_train',
        type=int,
        help='Number of longest non-redundant ORFs to train on (default: 500)'
    )

    # Run options
    parser.add_argument(
        '--output-dir',
        default='.',
        help='Directory containing the working directory and receiving outputs (default: .)'
    )
    parser.add_argument(
        '--util-dir',
        help='Directory searched first for the external utilities'
    )
    parser.add_argument(
        '--config',
        help='Configuration file (JSON or YAML)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Report each candidate retained because of domain or homology evidence'
    )

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        config = load_config(config_path=args.config, use_env=True)

        # Override config with command line arguments
        overrides = {
            'retain_long_orfs': args.retain_long_orfs,
            'pfam_hits': args.retain_pfam_hits,
            'blastp_hits': args.retain_blastp_hits,
            'cpu': args.cpu,
            'train_file': args.train,
            'top_orfs_train': args.top_orfs_train,
            'util_dir': args.util_dir,
        }
        for field_name, value in overrides.items():
            if value is not None:
                setattr(config, field_name, value)
        if args.verbose:
            config.verbose = True

        # Re-validate after CLI overrides.
        config.validate()

        from orf_selection_pipeline import OrfSelectionPipeline

        pipeline = OrfSelectionPipeline(config)
        result = pipeline.run(args.transcripts, output_dir=args.output_dir)

        if result.ok:
            logger.info(f"Pipeline completed successfully! {result.retained_count} candidates retained")
        else:
            logger.error(f"Pipeline failed ({result.status.value}): {result.message}")
        return result.exit_code

    except PipelineError as e:
        logger.error(f"Pipeline error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
