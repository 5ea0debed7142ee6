from __future__ import annotations

import numpy as np
import pytest

from sr3collate.diagnostics import IDENTIFIER_COLLISION, SERIES_LENGTH_MISMATCH, WELL_NAMES_MISSING
from sr3collate.errors import ConfigurationError, ExtractionError
from sr3collate.naming import ComponentResolver
from sr3collate.timeaxis import align_series
from sr3collate.wells import extract_well_series, rename_with_components

RESOLVER = ComponentResolver(["H2O", "CO2"])


@pytest.fixture
def alignment(time_table_factory, diagnostics):
    return align_series(time_table_factory(51), 10, diagnostics)


def test_extract_well_series_slices_and_renames(alignment, well_cube_factory, diagnostics) -> None:
    cube = well_cube_factory(2, 3, 50)
    series = extract_well_series(
        cube, ["P1", "I-1"], ["BHP", "X1", "X2"], alignment, RESOLVER, diagnostics=diagnostics
    )
    assert series.well_ids == ["P1", "I_1"]
    assert series.well_names == ["P1", "I-1"]
    assert series.variable_ids == ["BHP", "X_H2O", "X_CO2"]
    assert series.renamed == {"X1": "X_H2O", "X2": "X_CO2"}
    assert series.n_steps_full == 50
    assert series.n_steps_used == 5
    np.testing.assert_array_equal(series.data["I_1"]["X_CO2"], [1200.0, 1210.0, 1220.0, 1230.0, 1240.0])
    np.testing.assert_array_equal(series.data["P1"]["BHP"], [0.0, 10.0, 20.0, 30.0, 40.0])
    assert len(diagnostics) == 0


def test_series_are_copies(alignment, well_cube_factory) -> None:
    cube = well_cube_factory(1, 1, 50)
    series = extract_well_series(cube, ["P1"], ["BHP"], alignment)
    series.data["P1"]["BHP"][0] = -1.0
    assert cube[0, 0, 0] == 0.0


@pytest.mark.parametrize("names", [None, ["P1"]])
def test_missing_well_names_fall_back_to_synthetic(alignment, well_cube_factory, diagnostics, names) -> None:
    series = extract_well_series(
        well_cube_factory(2, 1, 50), names, ["BHP"], alignment, diagnostics=diagnostics
    )
    assert series.well_ids == ["WELL1", "WELL2"]
    assert diagnostics.codes() == [WELL_NAMES_MISSING]


@pytest.mark.parametrize("names", [None, ["BHP"]])
def test_variable_names_are_required(alignment, well_cube_factory, names) -> None:
    with pytest.raises(ExtractionError):
        extract_well_series(well_cube_factory(1, 2, 50), ["P1"], names, alignment)


def test_shorter_well_data_limits_selection(alignment, well_cube_factory, diagnostics) -> None:
    series = extract_well_series(well_cube_factory(1, 1, 35), ["P1"], ["BHP"], alignment, diagnostics=diagnostics)
    assert series.alignment.indices.tolist() == [0, 10, 20, 30]
    assert series.alignment.days.tolist() == [1.0, 11.0, 21.0, 31.0]
    assert series.data["P1"]["BHP"].tolist() == [0.0, 10.0, 20.0, 30.0]
    assert diagnostics.codes() == [SERIES_LENGTH_MISMATCH]


def test_longer_well_data_keeps_table_steps(alignment, well_cube_factory, diagnostics) -> None:
    series = extract_well_series(well_cube_factory(1, 1, 60), ["P1"], ["BHP"], alignment, diagnostics=diagnostics)
    assert series.n_steps_full == 60
    assert series.alignment.indices.tolist() == [0, 10, 20, 30, 40]
    assert diagnostics.has(SERIES_LENGTH_MISMATCH)


def test_non_cube_input_raises(alignment) -> None:
    with pytest.raises(ExtractionError, match="three-dimensional"):
        extract_well_series(np.zeros((2, 50)), ["P1"], ["BHP"], alignment)


def test_rename_collides_with_existing_identifier(diagnostics) -> None:
    renamed = rename_with_components(["X1", "X_H2O"], RESOLVER, diagnostics=diagnostics)
    assert renamed == ["X_H2O_2", "X_H2O"]
    assert diagnostics.codes() == [IDENTIFIER_COLLISION]


def test_duplicate_variable_suffix_is_not_a_component_index(alignment, well_cube_factory, diagnostics) -> None:
    series = extract_well_series(
        well_cube_factory(1, 3, 50), ["P1"], ["BHP", "bhp", "X1"], alignment, RESOLVER, diagnostics=diagnostics
    )
    assert series.variable_ids == ["BHP", "BHP_2", "X_H2O"]
    assert series.renamed == {"X1": "X_H2O"}
    np.testing.assert_array_equal(series.data["P1"]["BHP_2"][:2], [100.0, 110.0])
    assert diagnostics.codes() == [IDENTIFIER_COLLISION]


def test_duplicate_variable_error_policy(alignment, well_cube_factory) -> None:
    with pytest.raises(ConfigurationError):
        extract_well_series(
            well_cube_factory(1, 2, 50), ["P1"], ["BHP", "bhp"], alignment, RESOLVER, policy="error"
        )


def test_duplicate_well_names_are_suffixed(alignment, well_cube_factory, diagnostics) -> None:
    series = extract_well_series(
        well_cube_factory(2, 1, 50), ["P-1", "P 1"], ["BHP"], alignment, diagnostics=diagnostics
    )
    assert series.well_ids == ["P_1", "P1"]
    series = extract_well_series(
        well_cube_factory(2, 1, 50), ["P-1", "P_1"], ["BHP"], alignment, diagnostics=diagnostics
    )
    assert series.well_ids == ["P_1", "P_1_2"]
    assert diagnostics.has(IDENTIFIER_COLLISION)
