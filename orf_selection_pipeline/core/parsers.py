#!/usr/bin/env python3

"""
File parsers for candidate scores, evidence reports and sequences.

Evidence reports are advisory: malformed rows are skipped. Everything else
the run depends on is parsed strictly.
"""

import logging
import os
from typing import Dict, FrozenSet, Iterator, List

import pyfaidx

from .data_structures import ScoreRecord
from .exceptions import ParseError, PreconditionError


class EvidenceParser:
    """Collect candidate accessions from one column of an external search report."""

    description = "evidence"

    def __init__(self, file_path: str, accession_column: int,
                 delimiter=None, skip_comments: bool = True):
        if accession_column < 1:
            raise ValueError("accession_column is 1-based")
        self.file_path = file_path
        self.accession_column = accession_column
        self.delimiter = delimiter
        self.skip_comments = skip_comments
        self.skipped_lines = 0

    def parse(self) -> FrozenSet[str]:
        """Return the set of accessions with a hit."""
        if not os.path.isfile(self.file_path):
            raise PreconditionError(f"Cannot locate {self.description} file", self.file_path)

        index = self.accession_column - 1
        accessions = set()
        with open(self.file_path, 'r') as f:
            for line in f:
                line = line.rstrip('\n')
                if self.skip_comments and line.startswith('#'):
                    continue
                fields = line.split(self.delimiter)
                if len(fields) <= index or not fields[index].strip():
                    self.skipped_lines += 1
                    continue
                accessions.add(fields[index].strip())

        logging.info(f"Parsed {len(accessions)} accessions with {self.description} hits from {self.file_path}")
        if self.skipped_lines:
            logging.debug(f"Skipped {self.skipped_lines} malformed lines in {self.file_path}")
        return frozenset(accessions)


class DomainHitParser(EvidenceParser):
    """Domain search report (hmmscan --domtblout): whitespace-delimited, '#' comments."""

    description = "domain hits"

    def __init__(self, file_path: str, accession_column: int = 4):
        super().__init__(file_path, accession_column, delimiter=None)


class HomologyHitParser(EvidenceParser):
    """Homology search report (blastp -outfmt 6): tab-delimited, every line is a hit."""

    description = "homology hits"

    def __init__(self, file_path: str, accession_column: int = 1):
        super().__init__(file_path, accession_column, delimiter='\t', skip_comments=False)


class ScoresParser:
    """Parse the six-frame scores table: accession, length, own-frame score, other frame scores."""

    def __init__(self, file_path: str):
        self.file_path = file_path

    def __iter__(self) -> Iterator[ScoreRecord]:
        try:
            f = open(self.file_path, 'r')
        except OSError as e:
            raise ParseError(f"Cannot read scores file: {e}", self.file_path)

        with f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line or line.startswith('#'):
                    continue

                fields = line.split()
                if len(fields) < 3:
                    raise ParseError("expected accession, length and at least one frame score",
                                     self.file_path, line_num)
                try:
                    yield ScoreRecord(
                        accession=fields[0],
                        length=int(fields[1]),
                        frame_scores=tuple(float(s) for s in fields[2:]),
                    )
                except ValueError as e:
                    raise ParseError(str(e), self.file_path, line_num)


class SequenceHandler:
    """Indexed access to a FASTA file: lengths, longest entries and base composition."""

    def __init__(self, fasta_file: str):
        self.fasta_file = fasta_file

    def _open(self) -> pyfaidx.Fasta:
        try:
            return pyfaidx.Fasta(self.fasta_file, as_raw=True, sequence_always_upper=False)
        except (OSError, pyfaidx.FastaIndexingError, ValueError) as e:
            raise ParseError(f"Failed to index FASTA file: {e}", self.fasta_file)

    def lengths(self) -> Dict[str, int]:
        """Sequence lengths keyed by accession, in file order."""
        with self._open() as fasta:
            return {name: len(fasta[name]) for name in fasta.keys()}

    def longest_names(self, count: int) -> List[str]:
        """Accessions of the `count` longest entries; equal lengths keep file order."""
        lengths = self.lengths()
        ranked = sorted(lengths, key=lambda name: -lengths[name])
        return ranked[:count]

    def write_longest(self, dest_file: str, count: int) -> int:
        """Write the `count` longest entries to `dest_file`; return the number written."""
        names = self.longest_names(count)
        with self._open() as fasta, open(dest_file, 'w') as out:
            for name in names:
                record = fasta[name]
                out.write(f">{record.long_name.strip().lstrip('>')}\n")
                out.write(f"{record[:]}\n")
        logging.info(f"Wrote {len(names)} longest entries from {self.fasta_file} to {dest_file}")
        return len(names)

    def base_counts(self, both_strands: bool = False) -> Dict[str, int]:
        """Count A, C, G and T over all sequences, optionally adding the reverse strand."""
        counts = {base: 0 for base in 'ACGT'}
        with self._open() as fasta:
            for name in fasta.keys():
                sequence = str(fasta[name][:]).upper()
                for base in 'ACGT':
                    counts[base] += sequence.count(base)

        if both_strands:
            complement = {'A': 'T', 'C': 'G', 'G': 'C', 'T': 'A'}
            counts = {base: counts[base] + counts[complement[base]] for base in 'ACGT'}
        return counts

