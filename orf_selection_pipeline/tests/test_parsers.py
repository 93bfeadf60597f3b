#!/usr/bin/env python3

"""
Unit tests for evidence, scores and sequence parsers.
"""

import unittest
import tempfile
import shutil
import os
import sys

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from orf_selection_pipeline.core.exceptions import ParseError, PreconditionError
from orf_selection_pipeline.core.parsers import (
    DomainHitParser, HomologyHitParser, ScoresParser, SequenceHandler
)
from orf_selection_pipeline.tests.fixtures import write_fasta, read_fasta_names


DOMTBLOUT = """\
#                                                                            --- full sequence --- -------------- this domain -------------
# target name        accession   tlen query name           accession   qlen   E-value  score  bias
#------------------- ---------- ----- -------------------- ---------- ----- --------- ------ -----
Pkinase              PF00069.20   264 Gene.1::comp0::g.1::m.1 -            412   1.2e-60  204.9   0.0
Pkinase_Tyr          PF07714.12   260 Gene.1::comp0::g.1::m.1 -            412   3.1e-40  138.1   0.0
truncated line
WD40                 PF00400.27    39 Gene.7::comp3::g.7::m.7 -            301   6.6e-08   33.1   0.5
"""

BLASTP = """\
Gene.2::comp1::g.2::m.2\tsp|P12345|KIN_HUMAN\t88.5\t200\t23\t0\t1\t200\t1\t200\t1e-100\t350

Gene.9::comp4::g.9::m.9\tsp|Q99999|ABC_YEAST\t45.0\t120\t60\t2\t5\t124\t10\t130\t1e-20\t90
"""


class TestEvidenceParsers(unittest.TestCase):
    """Test domain and homology hit parsing."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _write(self, name, content):
        path = os.path.join(self.temp_dir, name)
        with open(path, 'w') as f:
            f.write(content)
        return path

    def test_domain_hits_use_query_column(self):
        parser = DomainHitParser(self._write("pfam.domtblout", DOMTBLOUT))
        hits = parser.parse()

        self.assertEqual(hits, frozenset({"Gene.1::comp0::g.1::m.1", "Gene.7::comp3::g.7::m.7"}))

    def test_domain_malformed_line_is_skipped(self):
        parser = DomainHitParser(self._write("pfam.domtblout", DOMTBLOUT))
        hits = parser.parse()

        # Hit after the truncated line is still captured
        self.assertIn("Gene.7::comp3::g.7::m.7", hits)
        self.assertEqual(parser.skipped_lines, 1)

    def test_domain_custom_column(self):
        path = self._write("hits.txt", "ORF.1 PF1\nORF.2 PF2\n")
        hits = DomainHitParser(path, accession_column=1).parse()
        self.assertEqual(hits, frozenset({"ORF.1", "ORF.2"}))

    def test_homology_hits_use_first_column(self):
        parser = HomologyHitParser(self._write("blastp.outfmt6", BLASTP))
        hits = parser.parse()

        self.assertEqual(hits, frozenset({"Gene.2::comp1::g.2::m.2", "Gene.9::comp4::g.9::m.9"}))
        self.assertEqual(parser.skipped_lines, 1)

    def test_homology_splits_on_tabs_only(self):
        path = self._write("blastp.outfmt6", "ORF 1\tsubject\t99.0\n")
        self.assertEqual(HomologyHitParser(path).parse(), frozenset({"ORF 1"}))

    def test_homology_keeps_hash_prefixed_accessions(self):
        path = self._write("blastp.outfmt6", "#ORF.1\tsp|X\t99\nORF.2\tsp|Y\t98\n")
        self.assertEqual(HomologyHitParser(path).parse(), frozenset({"#ORF.1", "ORF.2"}))

    def test_missing_file_is_fatal(self):
        missing = os.path.join(self.temp_dir, "absent.txt")
        with self.assertRaises(PreconditionError):
            DomainHitParser(missing).parse()
        with self.assertRaises(PreconditionError):
            HomologyHitParser(missing).parse()

    def test_empty_file_gives_empty_set(self):
        path = self._write("empty.txt", "")
        self.assertEqual(HomologyHitParser(path).parse(), frozenset())


class TestScoresParser(unittest.TestCase):
    """Test six-frame score table parsing."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.scores_file = os.path.join(self.temp_dir, "longest_orfs.cds.scores")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_parse_rows_in_order(self):
        with open(self.scores_file, 'w') as f:
            f.write("#acc\tlength\tscores\n")
            f.write("ORF.3\t450\t-2.1\t5.0\t1.0\t0.2\t-1.0\t0.4\n")
            f.write("\n")
            f.write("ORF.7 300 3.0 1.0 0.5 -0.2 0.1 0.0\n")

        records = list(ScoresParser(self.scores_file))

        self.assertEqual([r.accession for r in records], ["ORF.3", "ORF.7"])
        self.assertEqual(records[0].length, 450)
        self.assertEqual(records[0].frame_scores, (-2.1, 5.0, 1.0, 0.2, -1.0, 0.4))

    def test_malformed_row_is_fatal(self):
        with open(self.scores_file, 'w') as f:
            f.write("ORF.1\t300\t1.0\t0.0\n")
            f.write("ORF.2\tlong\t1.0\t0.0\n")

        with self.assertRaises(ParseError) as ctx:
            list(ScoresParser(self.scores_file))
        self.assertEqual(ctx.exception.line_number, 2)

    def test_too_few_columns_is_fatal(self):
        with open(self.scores_file, 'w') as f:
            f.write("ORF.1\t300\n")

        with self.assertRaises(ParseError):
            list(ScoresParser(self.scores_file))

    def test_missing_file_is_fatal(self):
        with self.assertRaises(ParseError):
            list(ScoresParser(os.path.join(self.temp_dir, "absent.scores")))


class TestSequenceHandler(unittest.TestCase):
    """Test indexed FASTA access."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.fasta = os.path.join(self.temp_dir, "cds.fa")
        write_fasta(self.fasta, [
            ("a", "type:complete len:3", "ATGAAATAA"),
            ("b", "", "ATGAAAAAATAA"),
            ("c", "type:internal", "ATGCCCTAA"),
            ("d", "", "ATGGGGGGGGGGTAA"),
        ])

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_lengths(self):
        lengths = SequenceHandler(self.fasta).lengths()
        self.assertEqual(lengths, {"a": 9, "b": 12, "c": 9, "d": 15})

    def test_longest_names_stable_for_ties(self):
        handler = SequenceHandler(self.fasta)
        self.assertEqual(handler.longest_names(3), ["d", "b", "a"])
        self.assertEqual(handler.longest_names(10), ["d", "b", "a", "c"])

    def test_write_longest_keeps_headers(self):
        dest = os.path.join(self.temp_dir, "top.fa")
        written = SequenceHandler(self.fasta).write_longest(dest, 2)

        self.assertEqual(written, 2)
        self.assertEqual(read_fasta_names(dest), ["d", "b"])

        dest = os.path.join(self.temp_dir, "top3.fa")
        SequenceHandler(self.fasta).write_longest(dest, 3)
        with open(dest) as f:
            content = f.read()
        self.assertIn(">a type:complete len:3\nATGAAATAA\n", content)

    def test_base_counts(self):
        path = os.path.join(self.temp_dir, "tx.fa")
        write_fasta(path, [("t1", "", "AACG"), ("t2", "", "ttNg")])

        self.assertEqual(SequenceHandler(path).base_counts(), {"A": 2, "C": 1, "G": 2, "T": 2})
        self.assertEqual(SequenceHandler(path).base_counts(both_strands=True),
                         {"A": 4, "C": 3, "G": 3, "T": 4})


if __name__ == '__main__':
    unittest.main()
