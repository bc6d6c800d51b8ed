"""Allele coding of SNP genotypes and writing of the text raw-data format.

A raw-data file starts with a version line, followed by lines of individual
ids, SNP names, chromosomes and positions (space separated, each item
followed by a space). Then come the allele codings and strands as two-digit
hexadecimal numbers, and one line per SNP with its packed genotypes, four
individuals per byte, also as two-digit hexadecimal numbers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

RAW_DATA_HEADER = "#GenABEL raw data version 0.1"
MISSING_ALLELE = "0"
ALL_MISSING_CODING = "12"

_SHIFTS = (6, 4, 2, 0)


class ConversionError(Exception):
    """Raised for input that cannot be converted to raw data."""


@dataclass(frozen=True)
class CodedSnp:
    """One SNP coded for the raw-data format.

    ``coding`` is the 1-based position of the allele pair in the list of
    allele codes; ``genotypes`` holds the packed genotypes.
    """

    coding: int
    genotypes: bytes


def _pack(values: Sequence[int]) -> bytes:
    return bytes(
        sum(value << shift for value, shift in zip(values[start:start + 4], _SHIFTS))
        for start in range(0, len(values), 4)
    )


def code_snp(alleles: Iterable[str], allele_codes: Sequence[str], snp_name: str = "") -> CodedSnp:
    """Code one SNP from its alleles, two consecutive alleles per individual.

    The allele ``"0"`` marks a missing allele. The first allele seen is
    allele 1 and the next different one allele 2. The coding is the more
    frequent allele followed by the other (allele 2 first on a tie), a
    doubled allele when only one is present, and "12" when all are missing.
    Genotypes are 1 and 3 for the homozygotes of the first and second allele
    of the coding, 2 for heterozygotes and 0 for missing.
    """
    calls = list(alleles)
    if len(calls) % 2:
        raise ConversionError(f"odd number of alleles for SNP '{snp_name}'")

    allele1: str | None = None
    allele2: str | None = None
    count1 = count2 = 0
    numbers = []
    for allele in calls:
        if allele == allele1:
            numbers.append(1)
            count1 += 1
        elif allele == allele2:
            numbers.append(3)
            count2 += 1
        elif allele == MISSING_ALLELE:
            numbers.append(0)
        elif allele1 is None:
            allele1 = allele
            numbers.append(1)
            count1 += 1
        elif allele2 is None:
            allele2 = allele
            numbers.append(3)
            count2 += 1
        else:
            raise ConversionError(f"illegal genotype (three alleles) for SNP '{snp_name}'!")

    if allele1 is None:
        coding = ALL_MISSING_CODING
    elif allele2 is None:
        coding = allele1 + allele1
    elif count1 > count2:
        coding = allele1 + allele2
    else:
        coding = allele2 + allele1

    matches = [index for index, code in enumerate(allele_codes, start=1) if code == coding]
    if not matches:
        raise ConversionError(f"coding '{coding}' for SNP not recognised !")

    first_major = count1 > count2
    by_sum = {0: 0, 2: 1 if first_major else 3, 4: 2, 6: 3 if first_major else 1}
    values = []
    for first, second in zip(numbers[0::2], numbers[1::2]):
        try:
            values.append(by_sum[first + second])
        except KeyError:
            raise ConversionError(
                f"illegal genotype (half missing) SNP '{snp_name}'!"
            ) from None
    return CodedSnp(coding=matches[-1], genotypes=_pack(values))


def _items_line(items: Iterable) -> str:
    return "".join(f"{item} " for item in items) + "\n"


def _hex_line(numbers: Iterable[int]) -> str:
    return "".join(f"{int(number):02x} " for number in numbers) + "\n"


def write_raw_data(
    path: str,
    ids: Iterable[str],
    snp_names: Iterable[str],
    chromosomes: Iterable[str],
    positions: Iterable,
    codings: Iterable[int],
    strands: Iterable[int],
    genotypes: Iterable[bytes],
) -> None:
    """Write a raw-data file."""
    try:
        handle = open(path, "w", encoding="latin-1", newline="\n")
    except OSError as exc:
        raise ConversionError(f"could not open file '{path}' !") from exc
    with handle:
        handle.write(RAW_DATA_HEADER + "\n")
        handle.write(_items_line(ids))
        handle.write(_items_line(snp_names))
        handle.write(_items_line(chromosomes))
        handle.write(_items_line(positions))
        handle.write(_hex_line(codings))
        handle.write(_hex_line(strands))
        for row in genotypes:
            handle.write(_hex_line(row))