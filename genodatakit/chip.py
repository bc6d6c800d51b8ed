"""Reading of Affymetrix genotype call files and annotation maps."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Iterable

_TOKEN_RE = re.compile(r"[^ \t\n\v\f\r]+")

_CALL_CODES = {"AA": 1, "1": 1, "AB": 2, "2": 2, "BB": 3, "3": 3}


class ChipError(Exception):
    """Raised for unreadable chip files and lookups outside the data."""


def cut_quotes(text: str) -> str:
    """Drop the last character of ``text`` and every double quote before it."""
    return text[:-1].replace('"', "")


class AffymetrixChipData:
    """Genotype calls of one chip, read from a whitespace-separated file.

    Calls are coded 0 (missing), 1 (AA), 2 (AB) and 3 (BB).
    """

    def __init__(
        self,
        filename: str,
        snp_position: int,
        polymorphism_position: int,
        skip_first_lines: int,
    ) -> None:
        self.filename = filename
        self._names: list[str] = []
        self._calls: list[int] = []
        try:
            with open(filename, encoding="latin-1", newline="") as handle:
                lines = handle.read().split("\n")
        except OSError as exc:
            raise ChipError(f'Can not open file "{filename}"') from exc

        for line in lines[skip_first_lines:]:
            for col, token in enumerate(_TOKEN_RE.findall(line)):
                if col == snp_position:
                    self._names.append(token)
                if col == polymorphism_position:
                    self._calls.append(_CALL_CODES.get(token, 0))
                if col >= snp_position and col >= polymorphism_position:
                    break

    def snp_amount(self) -> int:
        """Return the number of SNPs read."""
        return len(self._names)

    def _check(self, snp_num: int) -> None:
        if not 0 <= snp_num < len(self._names):
            raise ChipError(
                f"file {self.filename}: input SNP amount {snp_num} is too big. "
                f"Maximum is {len(self._names) - 1}"
            )

    def polymorphism(self, snp_num: int) -> int:
        """Return the call code of SNP ``snp_num``."""
        self._check(snp_num)
        return self._calls[snp_num]

    def snp_name(self, snp_num: int) -> str:
        """Return the name of SNP ``snp_num``."""
        self._check(snp_num)
        return self._names[snp_num]


@dataclass
class MapValues:
    """Annotation of one SNP."""

    snp_name: str = ""
    recoded_snp_name: str = ""
    physical_position: str = ""
    strand: str = ""
    chromosome: str = ""
    allele_a: str = ""
    allele_b: str = ""


class ChipMap:
    """Annotation lookup keyed by the chip's own SNP name."""

    def __init__(self, entries: Iterable[MapValues] = ()) -> None:
        self._map: dict[str, MapValues] = {}
        for entry in entries:
            self._map[entry.snp_name] = entry

    def _lookup(self, snp_name: str) -> MapValues:
        try:
            return self._map[snp_name]
        except KeyError:
            raise ChipError(f"SNP {snp_name} is not in the map") from None

    def recode_snp(self, snp_name: str) -> str:
        """Return the recoded name, e.g. an rs number."""
        return self._lookup(snp_name).recoded_snp_name

    def physical_position(self, snp_name: str) -> str:
        return self._lookup(snp_name).physical_position

    def strand(self, snp_name: str) -> str:
        return self._lookup(snp_name).strand

    def chromosome(self, snp_name: str) -> str:
        return self._lookup(snp_name).chromosome

    def allele_a(self, snp_name: str) -> str:
        return self._lookup(snp_name).allele_a

    def allele_b(self, snp_name: str) -> str:
        return self._lookup(snp_name).allele_b

    def is_snp_in_map(self, snp_name: str) -> bool:
        return snp_name in self._map


class AffymetrixChipMap(ChipMap):
    """Annotation read from a delimited Affymetrix annotation file.

    Each field loses its last character and its quotes (see
    :func:`cut_quotes`). Only lines ended by a newline are read. Records
    without a recoded name, with a missing position or a missing allele A
    are excluded and counted. A non-zero value in the ``reg1`` column marks
    the SNP as lying on chromosome "XY". Fields absent from a line keep the
    values of the line before.
    """

    def __init__(
        self,
        filename: str,
        skip_first_lines: int,
        snp_name_position: int,
        recoded_snp_name_position: int,
        physical_position_position: int,
        strand_position: int,
        chromosome_position: int,
        allele_a_position: int,
        allele_b_position: int,
        reg1_position: int,
        delim: str = ",",
    ) -> None:
        super().__init__()
        if len(delim) != 1:
            raise ValueError("delim must be a single character")
        try:
            with open(filename, encoding="latin-1", newline="") as handle:
                content = handle.read()
        except OSError as exc:
            raise ChipError(f"Can not open file {filename}") from exc

        self._exclude_amount = 0
        values = MapValues()
        lines = content.split("\n")[:-1]
        for line in lines[skip_first_lines:]:
            xy = False
            exclude = False
            for col, field in enumerate(line.split(delim)):
                if col == recoded_snp_name_position:
                    values.recoded_snp_name = cut_quotes(field)
                    if values.recoded_snp_name == "---":
                        exclude = True
                        break
                elif col == snp_name_position:
                    values.snp_name = cut_quotes(field)
                elif col == physical_position_position:
                    values.physical_position = cut_quotes(field)
                    if values.physical_position in ("---", "NA"):
                        exclude = True
                        break
                elif col == strand_position:
                    values.strand = cut_quotes(field)[:1]
                elif col == chromosome_position:
                    values.chromosome = cut_quotes(field)
                elif col == allele_a_position:
                    values.allele_a = cut_quotes(field)
                    if values.allele_a in ("-", "NA"):
                        exclude = True
                        break
                elif col == allele_b_position:
                    values.allele_b = cut_quotes(field)
                    if values.allele_a in ("-", "NA"):
                        exclude = True
                        break
                if col == reg1_position and cut_quotes(field) != "0":
                    xy = True
            if xy:
                values.chromosome = "XY"
            if exclude:
                self._exclude_amount += 1
            else:
                self._map[values.snp_name] = replace(values)

    def exclude_amount(self) -> int:
        """Return the number of records left out of the map."""
        return self._exclude_amount