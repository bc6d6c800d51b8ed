"""Conversion of Merlin/MACH pedigree and map files to the raw-data format."""

from __future__ import annotations

import logging
import re
from typing import Sequence

from .rawdata import ConversionError, code_snp, write_raw_data

log = logging.getLogger(__name__)

MAX_IDS = 200000

_TOKEN_RE = re.compile(r"[^ \t\n\v\f\r]+")
_POSITION_RE = re.compile(r"\+?[0-9]+")
_STRANDS = {"+": 1, "-": 2, "u": 0}


def _read_lines(filename: str) -> list[str]:
    try:
        with open(filename, encoding="latin-1", newline="") as handle:
            content = handle.read()
    except OSError as exc:
        raise ConversionError(f"could not open file '{filename}' !") from exc
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _read_map(
    map_filename: str, strand_id: int, map_has_header_line: bool
) -> tuple[list[str], list[str], list[int], list[int]]:
    lines = _read_lines(map_filename)
    if map_has_header_line:
        lines = lines[1:]
    if strand_id != 3 and strand_id not in _STRANDS.values():
        raise ConversionError(f"Strand code {strand_id} not recognised !")

    chromosomes: list[str] = []
    snp_names: list[str] = []
    positions: list[int] = []
    strands: list[int] = []
    wanted = 4 if strand_id == 3 else 3
    for line_no, line in enumerate(lines, start=1):
        fields = _TOKEN_RE.findall(line)
        if len(fields) < wanted or not _POSITION_RE.fullmatch(fields[2]):
            raise ConversionError(f"incomplete map record in line {line_no}:\n{line}")
        chromosomes.append(fields[0])
        snp_names.append(fields[1])
        positions.append(int(fields[2]))
        if strand_id == 3:
            try:
                strands.append(_STRANDS[fields[3]])
            except KeyError:
                raise ConversionError(
                    f"Strand code not recognised at line {line_no} !"
                ) from None
        else:
            strands.append(strand_id)
    return chromosomes, snp_names, positions, strands


def _read_pedigree(
    ped_filename: str, nsnps: int, fmt: int, traits: int, bcast: int
) -> tuple[list[str], list[tuple[str, str]]]:
    """Return the individual ids and, per individual, the two allele strings."""
    ids: list[str] = []
    people: list[tuple[str, str]] = []
    lasti = 1
    header = 5 if fmt == 0 else 3
    skip = header + traits if fmt == 0 else header

    for line_no, line in enumerate(_read_lines(ped_filename), start=1):
        if fmt == 0 and line_no >= MAX_IDS:
            raise ConversionError(
                f"Number of people is greater than MAXIDS allowed ({MAX_IDS})."
            )
        tokens = _TOKEN_RE.findall(line)
        if len(tokens) < header:
            raise ConversionError(
                f"too few records at line {line_no} of pedigree file '{ped_filename}' !"
            )
        person = tokens[1]
        chars = "".join(tokens[skip:])
        if len(chars) < 2 * nsnps:
            raise ConversionError(
                f"too few genotypes for person '{person}' "
                f"('{ped_filename}', line {line_no}) !"
            )
        ids.append(person)
        people.append((chars[0:2 * nsnps:2], chars[1:2 * nsnps:2]))

        read = nsnps * line_no
        if bcast and read > bcast * lasti:
            log.info("  ... read %d genotypes ...", read)
            lasti += 1
    return ids, people


def convert_snp_merlin(
    ped_filename: str,
    map_filename: str,
    outfilename: str,
    strand_id: int,
    bcast: int,
    allele_codes: Sequence[str],
    fmt: int = 0,
    traits: int = 0,
    map_has_header_line: bool = False,
) -> int:
    """Convert a pedigree file and its map to a raw-data file; return the SNP count.

    Map lines hold chromosome, SNP name and position, and the strand ("+",
    "-" or "u") when ``strand_id`` is 3; otherwise ``strand_id`` is the
    strand of every SNP. With ``fmt`` 0 pedigree lines start with family,
    individual, father, mother and sex, followed by ``traits`` trait columns;
    with any other ``fmt`` they start with family, individual and one more
    column. Then follow two allele characters per SNP, "0" marking missing.
    Progress is logged every ``bcast`` genotypes; 0 turns logging off.
    """
    codes = list(allele_codes)
    verbose = bool(bcast)

    if verbose:
        log.info("Reading map from file '%s' ...", map_filename)
    chromosomes, snp_names, positions, strands = _read_map(
        map_filename, strand_id, map_has_header_line
    )
    nsnps = len(snp_names)
    if verbose:
        log.info("... done.  Read positions of %d markers from file '%s'", nsnps, map_filename)
        log.info("Reading genotypes from file '%s' ...", ped_filename)

    ids, people = _read_pedigree(ped_filename, nsnps, fmt, traits, bcast)
    nids = len(ids)
    if verbose:
        log.info("...done.  Read information for %d people from file '%s'", nids, ped_filename)
        log.info("Analysing marker information ...")

    codings: list[int] = []
    genotypes: list[bytes] = []
    lasti = 1
    for snp, snp_name in enumerate(snp_names):
        alleles = [allele for first, second in people for allele in (first[snp], second[snp])]
        coded = code_snp(alleles, codes, snp_name)
        codings.append(coded.coding)
        genotypes.append(coded.genotypes)
        analysed = (snp + 1) * nids
        if verbose and analysed > bcast * lasti:
            log.info("  ... analysed %d genotypes ...", analysed)
            lasti += 1

    if verbose:
        log.info("Writing to file '%s' ...", outfilename)
    write_raw_data(
        outfilename, ids, snp_names, chromosomes, positions, codings, strands, genotypes
    )
    if verbose:
        log.info("... done.")
    return nsnps