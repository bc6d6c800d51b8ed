"""Conversion of Affymetrix genotype call files to the raw-data format."""

from __future__ import annotations

import logging
from typing import Sequence

from .chip import AffymetrixChipData, AffymetrixChipMap
from .rawdata import ConversionError, write_raw_data

log = logging.getLogger(__name__)

_STRAND_CODES = {"u": 0, "+": 1, "-": 2}
_SHIFTS = (6, 4, 2, 0)


def _pack_calls(calls: Sequence[int]) -> bytes:
    return bytes(
        sum((call << shift) for call, shift in zip(calls[start:start + 4], _SHIFTS)) & 0xFF
        for start in range(0, len(calls), 4)
    )


def convert_snp_affymetrix(
    dirname: str,
    filelist: Sequence[str],
    map_filename: str,
    outfilename: str,
    skip_affym: int,
    allele_id_names: Sequence[str],
    allele_ids: Sequence[int],
) -> int:
    """Convert chip call files to a raw-data file; return the SNP count written.

    Each file in ``filelist`` (inside ``dirname``) holds one individual's
    calls, SNP name and call per line after ``skip_affym`` header lines. The
    individual ids are the file names with spaces replaced by underscores.
    Only SNPs present in the annotation map are written, in the order of
    the first file. The allele pair "AB" of a SNP is coded by the entry of
    ``allele_ids`` at the position of that pair in ``allele_id_names``, or 0.
    """
    files = list(filelist)
    coding = dict(zip(allele_id_names, allele_ids))

    log.info("reading map...")
    chip_map = AffymetrixChipMap(map_filename, 2, 0, 2, 4, 5, 3, 9, 10, 6)
    log.info("map is read...")
    if chip_map.exclude_amount():
        log.info(
            "%d SNPs excluded from annotation because of absent enough "
            "information annotation file",
            chip_map.exclude_amount(),
        )

    chips = []
    for number, name in enumerate(files, start=1):
        path = f"{dirname}/{name}"
        log.info("%d: opening file %s", number, path)
        chips.append(AffymetrixChipData(path, 0, 1, skip_affym))
    if not chips:
        raise ConversionError("no chip files given")

    first = chips[0]
    all_names = [first.snp_name(index) for index in range(first.snp_amount())]
    kept = [
        (index, name) for index, name in enumerate(all_names) if chip_map.is_snp_in_map(name)
    ]

    ids = [name.replace(" ", "_") for name in files]
    snp_names = [chip_map.recode_snp(name) for _, name in kept]
    chromosomes = [chip_map.chromosome(name) for _, name in kept]
    positions = [chip_map.physical_position(name) for _, name in kept]
    codings = [
        int(coding.get(chip_map.allele_a(name) + chip_map.allele_b(name), 0))
        for _, name in kept
    ]
    strands = [_STRAND_CODES.get(chip_map.strand(name), 0) for _, name in kept]
    genotypes = [_pack_calls([chip.polymorphism(index) for chip in chips]) for index, _ in kept]

    log.info("Save to file %s", outfilename)
    write_raw_data(
        outfilename, ids, snp_names, chromosomes, positions, codings, strands, genotypes
    )
    excluded = len(all_names) - len(kept)
    log.info("%d SNPs excluded bacause of absent in annotation", excluded)
    log.info("Total %d SNPs are written into output file", len(kept))
    log.info("Finshed... Data saved into file %s", outfilename)
    return len(kept)