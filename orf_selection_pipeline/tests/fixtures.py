#!/usr/bin/env python3

"""
Shared fixtures: a minimal working directory and shell stand-ins for the
external utilities. Every stand-in appends its name and arguments to a call
log so tests can count invocations.
"""

import os
from typing import Dict, Iterable, List, Optional


CDS_ENTRIES = [
    ("ORF.1", "type:complete len:40", "ATG" + "GCA" * 38 + "TAA"),
    ("ORF.2", "type:complete len:20", "ATG" + "GCC" * 18 + "TAG"),
    ("ORF.3", "type:5prime_partial len:60", "GCT" * 59 + "TGA"),
    ("ORF.4", "type:complete len:10", "ATG" + "AAA" * 8 + "TAA"),
    ("ORF.5", "type:complete len:30", "ATG" + "CCG" * 28 + "TAA"),
]

SCORES_TABLE = """\
ORF.1\t120\t3.0\t1.0\t0.5\t-0.2\t0.1\t0.0
ORF.2\t60\t-2.1\t5.0\t1.0\t0.2\t-1.0\t0.4
ORF.3\t180\t0.5\t0.9\t0.1\t0.0\t0.0\t0.0
ORF.4\t30\t-5.0\t1.0\t1.0\t1.0\t1.0\t1.0
ORF.5\t90\t2.0\t2.0\t0.0\t0.0\t0.0\t0.0
"""

TOOL_SCRIPTS: Dict[str, str] = {
    "cd-hit-est": (
        'while [ $# -gt 0 ]; do\n'
        '  case "$1" in\n'
        '    -i) input="$2"; shift ;;\n'
        '    -o) output="$2"; shift ;;\n'
        '  esac\n'
        '  shift\n'
        'done\n'
        'cp "$input" "$output"\n'
    ),
    "seq_n_baseprobs_to_loglikelihood_vals.pl": 'printf "framed_kmer\\tlikelihood\\nAAAAAA\\t0.5\\n"\n',
    "score_CDS_likelihood_all_6_frames.pl": 'cat "@SCORES@"\n',
    "index_gff3_files_by_isoform.pl": 'cp "$1" "$1.inx"\n',
    "gene_list_to_gff.pl": 'cat "$1"\n',
    "remove_eclipsed_ORFs.pl": 'cat "$1"\n',
    "gff3_file_to_bed.pl": 'cat "$1"\n',
    "gff3_file_to_proteins.pl": 'echo "mode=$3"\ncat "$1"\n',
}

# Keeps every other record (1st, 3rd, ...) of its -i input, as if the rest were redundant.
REDUCING_CLUSTER_SCRIPT = (
    'while [ $# -gt 0 ]; do\n'
    '  case "$1" in\n'
    '    -i) input="$2"; shift ;;\n'
    '    -o) output="$2"; shift ;;\n'
    '  esac\n'
    '  shift\n'
    'done\n'
    'awk \'/^>/ { n++ } n % 2 == 1\' "$input" > "$output"\n'
)


def write_fasta(path: str, entries: Iterable) -> None:
    with open(path, 'w') as f:
        for name, description, sequence in entries:
            header = f"{name} {description}" if description else name
            f.write(f">{header}\n{sequence}\n")


def read_fasta_names(path: str) -> List[str]:
    with open(path) as f:
        return [line[1:].split()[0] for line in f if line.startswith('>')]


def install_fake_tools(tool_dir: str, scores_file: str, call_log: str,
                       failing: Iterable[str] = (), exit_status: int = 3,
                       replacements: Optional[Dict[str, str]] = None) -> None:
    """Write executable stand-ins for every external utility into `tool_dir`.

    `replacements` maps an executable name to an alternative script body.
    """
    os.makedirs(tool_dir, exist_ok=True)
    failing = set(failing)
    scripts = {**TOOL_SCRIPTS, **(replacements or {})}
    for executable, body in scripts.items():
        if executable in failing:
            body = f"exit {exit_status}\n"
        path = os.path.join(tool_dir, executable)
        with open(path, 'w') as f:
            f.write("#!/bin/sh\n")
            f.write(f'echo "{executable} $*" >> "{call_log}"\n')
            f.write(body.replace("@SCORES@", scores_file))
        os.chmod(path, 0o755)


def read_calls(call_log: str) -> List[str]:
    """Executable names in invocation order."""
    if not os.path.exists(call_log):
        return []
    with open(call_log) as f:
        return [line.split()[0] for line in f if line.strip()]


def build_workspace(root: str, transcripts_name: str = "transcripts.fasta",
                    tag: str = "transdecoder") -> Dict[str, str]:
    """Create a transcripts file, the enumeration working directory, tools and a scores table."""
    transcripts = os.path.join(root, transcripts_name)
    write_fasta(transcripts, [
        ("comp0_c0_seq1", "", "GGATCCATGGCAGCAGCATAAGG" * 4),
        ("comp1_c0_seq1", "", "ATGCCGCCGTAGCCAATTAA"),
    ])

    work_dir = os.path.join(root, f"{transcripts_name}.{tag}_dir")
    os.makedirs(work_dir)
    prefix = os.path.join(work_dir, "longest_orfs")
    write_fasta(f"{prefix}.cds", CDS_ENTRIES)
    write_fasta(f"{prefix}.pep", [(name, desc, "M" * 5) for name, desc, _ in CDS_ENTRIES])
    with open(f"{prefix}.gff3", 'w') as f:
        for name, _, sequence in CDS_ENTRIES:
            f.write(f"comp0_c0_seq1\ttransdecoder\tCDS\t1\t{len(sequence)}\t.\t+\t0\tID=cds.{name};Parent={name}\n")

    scores = os.path.join(root, "scores.tsv")
    with open(scores, 'w') as f:
        f.write(SCORES_TABLE)

    tool_dir = os.path.join(root, "util")
    call_log = os.path.join(root, "calls.log")
    install_fake_tools(tool_dir, scores, call_log)

    return {
        "transcripts": transcripts,
        "work_dir": work_dir,
        "cds": f"{prefix}.cds",
        "gff3": f"{prefix}.gff3",
        "scores": scores,
        "tool_dir": tool_dir,
        "call_log": call_log,
    }
