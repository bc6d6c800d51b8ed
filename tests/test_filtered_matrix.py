import pytest

from genodatakit.abstract_matrix import AbstractMatrix
from genodatakit.castutils import DataType, pack_values, unpack_values
from genodatakit.filtered_matrix import FilteredMatrix


class MemoryMatrix(AbstractMatrix):
    def __init__(self, nvars, nobs):
        self.nobs = nobs
        self.vars = [
            bytearray(pack_values([v * 1000 + o for o in range(nobs)], DataType.INT))
            for v in range(nvars)
        ]
        self.var_names = [f"v{v}" for v in range(nvars)]
        self.obs_names = [f"o{o}" for o in range(nobs)]
        self.calls = []
        self.saved = {}
        self.element_writes = 0

    def file_name(self):
        return "memory"

    def num_variables(self):
        return len(self.vars)

    def num_observations(self):
        return self.nobs

    def element_type(self):
        return DataType.INT

    def read_variable(self, var_idx):
        return bytes(self.vars[var_idx])

    def write_variable(self, var_idx, data):
        self.vars[var_idx] = bytearray(data)

    def read_element(self, var_idx, obs_idx):
        return bytes(self.vars[var_idx][obs_idx * 4:(obs_idx + 1) * 4])

    def write_element(self, var_idx, obs_idx, data):
        self.element_writes += 1
        self.vars[var_idx][obs_idx * 4:(obs_idx + 1) * 4] = data

    def add_variable(self, data, name):
        self.vars.append(bytearray(data))
        self.var_names.append(name)

    def read_variable_name(self, var_idx):
        return self.var_names[var_idx]

    def write_variable_name(self, var_idx, name):
        self.var_names[var_idx] = name

    def read_observation_name(self, obs_idx):
        return self.obs_names[obs_idx]

    def write_observation_name(self, obs_idx, name):
        self.obs_names[obs_idx] = name

    def save_as(self, new_file_name, var_indexes, obs_indexes):
        var_indexes = list(var_indexes)
        obs_indexes = list(obs_indexes)
        self.calls.append(("save_as", new_file_name, var_indexes, obs_indexes))
        copy = MemoryMatrix(0, len(obs_indexes))
        copy.vars = [
            bytearray(b"".join(self.read_element(v, o) for o in obs_indexes))
            for v in var_indexes
        ]
        copy.var_names = [self.var_names[v] for v in var_indexes]
        copy.obs_names = [self.obs_names[o] for o in obs_indexes]
        self.saved[new_file_name] = copy

    def save_as_text(self, new_file_name, save_var_names, save_obs_names, nan_string):
        self.calls.append(("text", new_file_name, save_var_names, save_obs_names, nan_string))

    def cache_all_names(self, do_cache):
        self.calls.append(("cache", do_cache))

    def set_update_names_on_write(self, update):
        self.calls.append(("update", update))

    def set_read_only(self, read_only):
        self.calls.append(("ro", read_only))
        return read_only

    def value(self, var_idx, obs_idx):
        return unpack_values(self.read_element(var_idx, obs_idx), DataType.INT)[0]


def ints(values):
    return pack_values(values, DataType.INT)


@pytest.fixture
def nested():
    return MemoryMatrix(4, 5)


@pytest.fixture
def filtered(nested):
    fm = FilteredMatrix(nested)
    fm.set_filtered_area([3, 1], [4, 0, 2])
    return fm


def test_no_filtering_matches_nested(nested):
    fm = FilteredMatrix(nested)
    assert fm.num_variables() == nested.num_variables()
    assert fm.num_observations() == nested.num_observations()
    for v in range(nested.num_variables()):
        assert fm.read_variable(v) == nested.read_variable(v)


def test_dimensions_and_type(filtered, nested):
    assert filtered.num_variables() == 2
    assert filtered.num_observations() == 3
    assert filtered.element_type() is DataType.INT
    assert filtered.element_size() == nested.element_size()
    assert filtered.file_name() == nested.file_name()
    assert filtered.nested() is nested


def test_read_variable_selects_columns(filtered, nested):
    values = unpack_values(filtered.read_variable(0), DataType.INT)
    assert values == [nested.value(3, 4), nested.value(3, 0), nested.value(3, 2)]


def test_read_variable_as(filtered, nested):
    assert filtered.read_variable_as(1) == [
        float(nested.value(1, 4)), float(nested.value(1, 0)), float(nested.value(1, 2))
    ]


def test_write_variable_updates_only_selected(filtered, nested):
    untouched = nested.value(3, 1)
    filtered.write_variable(0, ints([7, 8, 9]))
    assert nested.value(3, 4) == 7
    assert nested.value(3, 0) == 8
    assert nested.value(3, 2) == 9
    assert nested.value(3, 1) == untouched
    assert unpack_values(filtered.read_variable(0), DataType.INT) == [7, 8, 9]


def test_write_variable_small_share_goes_element_wise():
    nested = MemoryMatrix(2, 200)
    fm = FilteredMatrix(nested)
    fm.set_filtered_area([1], [5])
    before = nested.read_variable(1)
    fm.write_variable(0, ints([42]))
    assert nested.element_writes == 1
    assert nested.value(1, 5) == 42
    after = nested.read_variable(1)
    assert after[:20] == before[:20] and after[24:] == before[24:]


def test_write_variable_wrong_length(filtered):
    with pytest.raises(ValueError):
        filtered.write_variable(0, ints([1, 2]))


def test_element_round_trip(filtered, nested):
    filtered.write_element(1, 2, ints([55]))
    assert nested.value(1, 2) == 55
    assert filtered.read_element(1, 2) == ints([55])
    filtered.write_element_as(0, 0, 11.0)
    assert nested.value(3, 4) == 11
    assert filtered.read_element_as(0, 0) == 11.0


def test_observation_round_trip(filtered, nested):
    assert filtered.read_observation(1) == ints([nested.value(3, 0), nested.value(1, 0)])
    filtered.write_observation(2, ints([21, 22]))
    assert nested.value(3, 2) == 21
    assert nested.value(1, 2) == 22


def test_add_variable_refused(filtered):
    with pytest.raises(TypeError):
        filtered.add_variable(ints([1, 2, 3]), "new")


def test_names_are_mapped(filtered, nested):
    assert filtered.read_variable_name(0) == nested.read_variable_name(3)
    assert filtered.read_observation_name(0) == nested.read_observation_name(4)
    filtered.write_variable_name(1, "snpA")
    filtered.write_observation_name(2, "idB")
    assert nested.read_variable_name(1) == "snpA"
    assert nested.read_observation_name(2) == "idB"


def test_save_as_whole_view(filtered, nested):
    filtered.save_as("out")
    assert nested.calls[-1] == ("save_as", "out", [3, 1], [4, 0, 2])
    saved = FilteredMatrix(nested.saved["out"])
    assert saved.num_variables() == filtered.num_variables()
    assert saved.num_observations() == filtered.num_observations()
    for v in range(filtered.num_variables()):
        assert saved.read_variable(v) == filtered.read_variable(v)
        assert saved.read_variable_name(v) == filtered.read_variable_name(v)
    for o in range(filtered.num_observations()):
        assert saved.read_observation_name(o) == filtered.read_observation_name(o)


def test_save_as_with_indexes(filtered, nested):
    filtered.save_as("out2", [1], [2, 0])
    assert nested.calls[-1] == ("save_as", "out2", [1], [2, 4])
    saved = FilteredMatrix(nested.saved["out2"])
    assert saved.num_variables() == 1
    assert saved.read_variable(0) == filtered.read_element(1, 2) + filtered.read_element(1, 0)
    assert saved.read_variable_name(0) == filtered.read_variable_name(1)


def test_delegated_settings(filtered, nested):
    filtered.save_as_text("t.txt", True, False, "NA")
    filtered.cache_all_names(True)
    filtered.set_update_names_on_write(False)
    assert filtered.set_read_only(True) is True
    assert nested.calls == [
        ("text", "t.txt", True, False, "NA"),
        ("cache", True),
        ("update", False),
        ("ro", True),
    ]