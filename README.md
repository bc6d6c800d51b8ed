# genodatakit

A library for handling genotype and phenotype data. It has no dependencies outside the standard library.

## What it contains

- **`genodatakit.castutils`**: the eight element types of a matrix file, held in `DataType`. These are unsigned/signed short, unsigned/signed int, float, double, signed char and unsigned char.
  - Each integer type marks a missing value with its largest value. The float types use NaN.
  - `parse_value` and `format_value` convert between elements and text.
  - `cast_value` converts a Python number to a stored value.
  - `pack_values` and `unpack_values` convert to and from little-endian bytes.
  - `data_type_from_string`, `data_type_to_string`, `element_size`, `nan_value` and `is_nan` complete the set.
  - An unknown type code or name raises `UnknownDataTypeError`.
- **`genodatakit.abstract_matrix`**: `AbstractMatrix`, the interface of a matrix with variables as rows and observations as columns.
  - Raw access works on bytes.
  - The `*_as` methods convert to and from floats: `read_variable_as`, `write_variable_as`, `add_variable_as`, `read_element_as` and `write_element_as`. NaN or `None` marks a missing value.
  - A conversion that loses data issues one `RuntimeWarning` per matrix.
  - `check_open_for_writing` and `close_for_writing` keep a registry of files that are open for writing. A second registration raises `FileAlreadyOpenError`.
- **`genodatakit.filtered_matrix`**: `FilteredMatrix`, a view of a chosen subset of the variables and observations of another matrix.
  - Reads and writes pass through to the wrapped matrix.
  - Naming, saving, name caching and read-only switching are handed on to the wrapped matrix. That matrix must therefore provide methods of the same names: `read_variable_name`, `save_as`, `save_as_text`, `cache_all_names` and so on.
- **`genodatakit.filehandles`**: `ReusableFileHandle.get_handle` returns positioned handles onto one shared `SharedFile` stream for each file and mode. The stream is closed when its last handle is closed.
- **`genodatakit.transposer`**: `Transposer.copy_data` transposes a binary data file of `nvars` × `nobss` elements block by block, so the whole matrix is never held in memory.
- **`genodatakit.cholesky`**: three in-place routines on square lists of lists.
  - `cholesky2` computes the F D F' decomposition.
  - `chsolve2` solves A b = y from that decomposition.
  - `chinv2` inverts the matrix from that decomposition.
- **Genotype converters**, which write the text format "GenABEL raw data version 0.1" through `genodatakit.rawdata.write_raw_data`:
  - `genodatakit.illumina.convert_snp_illumina`
  - `genodatakit.merlin.convert_snp_merlin`
  - `genodatakit.affymetrix.convert_snp_affymetrix`, which reads chips and annotation with `AffymetrixChipData` and `AffymetrixChipMap` from `genodatakit.chip`

  Allele coding is done by `genodatakit.rawdata.code_snp`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

### A matrix kept in memory

`AbstractMatrix` is an interface; a concrete matrix supplies the raw access:

```python
from genodatakit.abstract_matrix import AbstractMatrix
from genodatakit.castutils import DataType
from genodatakit.filtered_matrix import FilteredMatrix


class MemoryMatrix(AbstractMatrix):
    def __init__(self, nvars, nobs, dtype=DataType.DOUBLE):
        self._dtype = dtype
        self._nobs = nobs
        self._rows = [bytearray(nobs * self.element_size()) for _ in range(nvars)]

    def file_name(self):
        return "<memory>"

    def num_variables(self):
        return len(self._rows)

    def num_observations(self):
        return self._nobs

    def element_type(self):
        return self._dtype

    def read_variable(self, var_idx):
        return bytes(self._rows[var_idx])

    def write_variable(self, var_idx, data):
        self._rows[var_idx][:] = data

    def read_element(self, var_idx, obs_idx):
        size = self.element_size()
        return bytes(self._rows[var_idx][obs_idx * size:(obs_idx + 1) * size])

    def write_element(self, var_idx, obs_idx, data):
        size = self.element_size()
        self._rows[var_idx][obs_idx * size:(obs_idx + 1) * size] = data

    def add_variable(self, data, name):
        self._rows.append(bytearray(data))


matrix = MemoryMatrix(2, 3)
matrix.write_variable_as(0, [1.5, float("nan"), 3])
matrix.read_variable_as(0)          # [1.5, nan, 3.0]

view = FilteredMatrix(matrix)
view.set_filtered_area([0], [2])
view.read_variable_as(0)            # [3.0]
```

### Cholesky decomposition

```python
from genodatakit.cholesky import cholesky2, chsolve2, chinv2

a = [[4.0, 2.0], [2.0, 3.0]]
rank = cholesky2(a, 1e-9)      # factorises `a` in place, returns its rank
b = chsolve2(a, [2.0, 1.0])    # returns the solution as a new list
chinv2(a)                      # upper triangle now holds the inverse of A
```

### Converting an Illumina genotype table

```python
from genodatakit.illumina import convert_snp_illumina

convert_snp_illumina(
    "genotypes.illu",
    "genotypes.raw",
    strand_id=0,
    bcast=1000000,
    allele_codes=["AC", "CA", "AG", "GA", "AT", "TA", "CG", "GC", "CT", "TC", "GT", "TG", "12"],
)
```

### Converting a pedigree and map

```python
from genodatakit.merlin import convert_snp_merlin

convert_snp_merlin(
    "study.ped", "study.map", "study.raw",
    strand_id=0, bcast=1000000,
    allele_codes=["AC", "CA", "12", "21"],
    fmt=0, traits=0, map_has_header_line=True,
)
```

## Errors and logging

- The converters raise `genodatakit.rawdata.ConversionError` for malformed input. This includes:
  - missing fields;
  - a third allele at one SNP;
  - half-missing genotypes;
  - allele codings that are not in the given list.
- The chip readers raise `genodatakit.chip.ChipError` for files that cannot be opened and for lookups outside the data.
- Progress is reported through the standard `logging` module.

## What the package does not do

- There is no concrete file-backed matrix. The package has no class that opens, creates or validates matrix files with their index of variable and observation names. `AbstractMatrix` has to be implemented by the user, and so do the naming and saving methods that `FilteredMatrix` passes on.
- `Transposer` transposes the data file only. It does not create the destination's header or copy names.
- There is no command-line program. Everything is used from Python.