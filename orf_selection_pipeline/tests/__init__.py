#!/usr/bin/env python3

"""
Test suite for the ORF selection pipeline.

Unit tests covering:
- Configuration management and validation
- Data structures and run path derivation
- Evidence, scores and FASTA parsing
- Candidate selection rule
- Training set curation
- Stage execution and checkpoints
- End-to-end runs against stand-in external tools
"""
