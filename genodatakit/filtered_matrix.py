"""A view onto a subset of the variables and observations of another matrix."""

from __future__ import annotations

from typing import Iterable, Sequence

from .abstract_matrix import AbstractMatrix

# Below this share of the nested observations, a variable is written
# element by element instead of by a read-modify-write of the whole variable.
WRITE_SPEED_PROPORTION = 0.01


class FilteredMatrix(AbstractMatrix):
    """Maps filtered variable/observation indices onto a nested matrix.

    Variables are rows and observations are columns. Reads and writes go
    through to the nested matrix.
    """

    def __init__(self, matrix: AbstractMatrix) -> None:
        self._nested = matrix
        self._rows: list[int] = []
        self._cols: list[int] = []
        self.set_no_filtering()

    def set_no_filtering(self) -> None:
        """Show every variable and observation of the nested matrix."""
        self._rows = list(range(self._nested.num_variables()))
        self._cols = list(range(self._nested.num_observations()))

    def set_filtered_area(self, row_mask: Iterable[int], col_mask: Iterable[int]) -> None:
        """Show only the given nested variable and observation indices, in order."""
        self._rows = list(row_mask)
        self._cols = list(col_mask)

    def nested(self) -> AbstractMatrix:
        """Return the wrapped matrix."""
        return self._nested

    def file_name(self) -> str:
        return self._nested.file_name()

    def num_variables(self) -> int:
        return len(self._rows)

    def num_observations(self) -> int:
        return len(self._cols)

    def element_type(self):
        return self._nested.element_type()

    def element_size(self) -> int:
        return self._nested.element_size()

    def _check_length(self, data: bytes, count: int) -> None:
        expected = count * self.element_size()
        if len(data) != expected:
            raise ValueError(f"expected {expected} bytes, got {len(data)}")

    def read_variable(self, var_idx: int) -> bytes:
        size = self.element_size()
        data = self._nested.read_variable(self._rows[var_idx])
        return b"".join(data[col * size:(col + 1) * size] for col in self._cols)

    def write_variable(self, var_idx: int, data: bytes) -> None:
        self._check_length(data, self.num_observations())
        size = self.element_size()
        nested_nobs = self._nested.num_observations()
        if nested_nobs == 0:
            return
        if self.num_observations() / nested_nobs > WRITE_SPEED_PROPORTION:
            real_var = self._rows[var_idx]
            if self.num_observations() != nested_nobs:
                buffer = bytearray(self._nested.read_variable(real_var))
            else:
                buffer = bytearray(size * nested_nobs)
            for i, col in enumerate(self._cols):
                buffer[col * size:(col + 1) * size] = data[i * size:(i + 1) * size]
            self._nested.write_variable(real_var, bytes(buffer))
        else:
            for i in range(self.num_observations()):
                self.write_element(var_idx, i, data[i * size:(i + 1) * size])

    def read_element(self, var_idx: int, obs_idx: int) -> bytes:
        return self._nested.read_element(self._rows[var_idx], self._cols[obs_idx])

    def write_element(self, var_idx: int, obs_idx: int, data: bytes) -> None:
        self._nested.write_element(self._rows[var_idx], self._cols[obs_idx], data)

    def read_observation(self, obs_idx: int) -> bytes:
        """Return the raw bytes of one observation across all variables."""
        return b"".join(
            self.read_element(var_idx, obs_idx) for var_idx in range(self.num_variables())
        )

    def write_observation(self, obs_idx: int, data: bytes) -> None:
        """Write one observation across all variables from raw bytes."""
        self._check_length(data, self.num_variables())
        size = self.element_size()
        for var_idx in range(self.num_variables()):
            self.write_element(var_idx, obs_idx, data[var_idx * size:(var_idx + 1) * size])

    def add_variable(self, data: bytes, name: str) -> None:
        raise TypeError("FilteredMatrix doesn't support add_variable.")

    def read_variable_name(self, var_idx: int):
        return self._nested.read_variable_name(self._rows[var_idx])

    def write_variable_name(self, var_idx: int, name) -> None:
        self._nested.write_variable_name(self._rows[var_idx], name)

    def read_observation_name(self, obs_idx: int):
        return self._nested.read_observation_name(self._cols[obs_idx])

    def write_observation_name(self, obs_idx: int, name) -> None:
        self._nested.write_observation_name(self._cols[obs_idx], name)

    def save_as(
        self,
        new_file_name: str,
        var_indexes: Sequence[int] | None = None,
        obs_indexes: Sequence[int] | None = None,
    ) -> None:
        """Save the selected part of the view to a new file.

        Indexes refer to this view; omitted indexes select everything visible.
        """
        rows = self._rows if var_indexes is None else [self._rows[i] for i in var_indexes]
        cols = self._cols if obs_indexes is None else [self._cols[i] for i in obs_indexes]
        self._nested.save_as(new_file_name, list(rows), list(cols))

    def save_as_text(
        self, new_file_name: str, save_var_names: bool, save_obs_names: bool, nan_string: str
    ) -> None:
        """Save the nested matrix as text; the filter is not applied."""
        self._nested.save_as_text(new_file_name, save_var_names, save_obs_names, nan_string)

    def cache_all_names(self, do_cache: bool) -> None:
        self._nested.cache_all_names(do_cache)

    def set_update_names_on_write(self, update: bool) -> None:
        self._nested.set_update_names_on_write(update)

    def set_read_only(self, read_only: bool) -> bool:
        return self._nested.set_read_only(read_only)