#!/usr/bin/env python3

"""
Final output generation from the surviving candidate set.
"""

import logging
import shutil
from typing import List

from .data_structures import RunPaths
from .runner import StageRunner


class OutputGenerator:
    """Emit the final GFF3, BED, peptide, CDS and transcript-region files."""

    # extension -> gff3_file_to_proteins.pl sequence mode
    SEQUENCE_OUTPUTS = (
        ("pep", "prot"),
        ("cds", "CDS"),
        ("mRNA", "cDNA"),
    )

    def __init__(self, runner: StageRunner, paths: RunPaths):
        self.runner = runner
        self.paths = paths

    def generate_outputs(self) -> List[str]:
        """Write every final output and return their paths."""
        gff3 = self.paths.final_output("gff3")
        bed = self.paths.final_output("bed")

        self.runner.run("final_gff3", None,
                        lambda: shutil.copyfile(self.paths.eclipsed_removed_gff3, gff3))
        self.runner.run("final_bed", None,
                        lambda: self.runner.run_tool("gff3_to_bed", [gff3], stdout_path=bed))

        outputs = [gff3, bed]
        for extension, mode in self.SEQUENCE_OUTPUTS:
            output = self.paths.final_output(extension)
            self.runner.run(
                f"final_{extension}", None,
                lambda output=output, mode=mode: self.runner.run_tool(
                    "gff3_to_proteins", [gff3, self.paths.transcripts, mode], stdout_path=output),
            )
            outputs.append(output)

        for path in outputs:
            logging.info(f"Created: {path}")
        logging.info(f"Final outputs written to {self.paths.output_dir}")
        return outputs
