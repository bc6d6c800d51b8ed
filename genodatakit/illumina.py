"""Conversion of Illumina genotype tables to the raw-data format."""

from __future__ import annotations

import logging
import re
from typing import Sequence

from .rawdata import MISSING_ALLELE, ConversionError, code_snp, write_raw_data

log = logging.getLogger(__name__)

_STRANDS = {"u": 0, "+": 1, "-": 2}
_POSITION_RE = re.compile(r"\+?[0-9]+")


def _read_lines(filename: str) -> list[str]:
    try:
        with open(filename, encoding="latin-1", newline="") as handle:
            content = handle.read()
    except OSError as exc:
        raise ConversionError(f"could not open file '{filename}'!") from exc
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _alleles(token: str) -> list[str]:
    pair = (token + MISSING_ALLELE * 2)[:2]
    return [MISSING_ALLELE if char == "-" else char for char in pair]


def convert_snp_illumina(
    filename: str,
    outfilename: str,
    strand_id: int,
    bcast: int,
    allele_codes: Sequence[str],
) -> int:
    """Convert an Illumina table to a raw-data file; return the number of SNPs.

    The first line holds three column titles (four when ``strand_id`` is 3)
    followed by the individual ids. Every other line holds a SNP name,
    chromosome and position, then the strand ("u", "+" or "-") when
    ``strand_id`` is 3, then one two-letter genotype per individual. "0"
    and "-" mark missing alleles. Otherwise ``strand_id`` is used as the
    strand of every SNP. Progress is logged every ``bcast`` genotypes.
    """
    codes = list(allele_codes)
    lines = _read_lines(filename)
    log.info("Reading genotypes from file '%s' ...", filename)
    if not lines:
        raise ConversionError(f"Can not read the first line from file '{filename}'!")

    skip = 4 if strand_id == 3 else 3
    ids = lines[0].split()[skip:]
    nids = len(ids)

    snp_names: list[str] = []
    chromosomes: list[str] = []
    positions: list[int] = []
    strands: list[int] = []
    codings: list[int] = []
    genotypes: list[bytes] = []
    lasti = 1

    for line_no, line in enumerate(lines[1:], start=2):
        fields = line.split()
        if len(fields) < 3 or not _POSITION_RE.fullmatch(fields[2]):
            raise ConversionError(f"First three fields are missing in line {line_no}!")
        snp_name, chromosome = fields[0], fields[1]
        snp_names.append(snp_name)
        chromosomes.append(chromosome)
        positions.append(int(fields[2]))
        rest = fields[3:]

        if strand_id == 3:
            if not rest:
                raise ConversionError(
                    f"Strand field is missing in line {line_no}, SNP '{snp_name}'!"
                )
            strand = rest.pop(0)
            if strand not in _STRANDS:
                raise ConversionError(
                    f"Bad strand coding ('{strand}'), only '+', '-' or 'u' is accepted!"
                )
            strands.append(_STRANDS[strand])
        else:
            strands.append(strand_id)

        if len(rest) < nids:
            raise ConversionError(
                f"Too few fields for SNP '{snp_name}', line {line_no} "
                f"(no. IDs = {nids}, no. fields = {len(rest) + 1})!"
            )
        alleles = [char for token in rest[:nids] for char in _alleles(token)]
        coded = code_snp(alleles, codes, snp_name)
        codings.append(coded.coding)
        genotypes.append(coded.genotypes)

        analysed = len(snp_names) * nids
        if analysed > bcast * lasti:
            log.info("  ... analysed %d genotypes ...", analysed)
            lasti += 1

    log.info("Writing to file '%s' ...", outfilename)
    write_raw_data(
        outfilename, ids, snp_names, chromosomes, positions, codings, strands, genotypes
    )
    log.info("... done.")
    return len(snp_names)