import os

import numpy as np
import pytest
from scipy.io import savemat

from adcpcast.constants.constants import *
from adcpcast.dataclasses.dataclasses import CastSelection, LoadStatus, SentinelRule
from adcpcast.exceptions.exceptions import MalformedRecordError, NotFoundError
from adcpcast.loadcast.loader import build_cast, find_cast_record, load_casts, read_cast_record
from conftest import write_cast_csv


def test_load_casts_excludes_placeholders(survey_dir):
    report = load_casts(str(survey_dir), CastSelection.all_up_to(9))
    assert list(report.casts) == [5, 9]
    assert report.excluded == [1, 2]
    assert report.not_found == [3, 4, 6, 7, 8]
    assert report.malformed == []


def test_load_casts_ascending_for_unordered_selection(survey_dir):
    report = load_casts(str(survey_dir), CastSelection.explicit([9, 5]))
    assert [result.cast_id for result in report.results] == [9, 5]
    assert list(report.casts) == [5, 9]


def test_load_casts_positions(survey_dir):
    casts = load_casts(str(survey_dir), CastSelection.explicit([5])).casts
    assert casts[5].longitude == pytest.approx(-79.3)
    assert casts[5].latitude == pytest.approx(26.4)
    np.testing.assert_allclose(casts[5].depth, [2.0, 4.0, 6.0, 8.0])
    np.testing.assert_allclose(casts[5].eastward_velocity, [0.1, 0.2, 0.3, 0.4])
    assert casts[5].pressure is None


def test_load_casts_records_not_found(tmp_path):
    report = load_casts(str(tmp_path), CastSelection.explicit([3]))
    result = report.results[0]
    assert result.status is LoadStatus.NOT_FOUND
    assert isinstance(result.error, NotFoundError)
    assert result.error.cast_id == 3
    assert "Cast003" in str(result.error)


def test_load_casts_continues_after_malformed_record(tmp_path):
    write_cast_csv(tmp_path, 3, v=None)
    write_cast_csv(tmp_path, 4)
    report = load_casts(str(tmp_path), CastSelection.explicit([3, 4]))
    assert report.malformed == [3]
    assert list(report.casts) == [4]
    assert report.results[0].error.field == NORTHWARD_VELOCITY.label


def test_load_casts_summary(survey_dir):
    summary = load_casts(str(survey_dir), CastSelection.all_up_to(9)).summary()
    assert summary[LoadStatus.LOADED] == 2
    assert summary[LoadStatus.EXCLUDED] == 2
    assert summary[LoadStatus.NOT_FOUND] == 5


def test_load_casts_custom_sentinel_rule(survey_dir):
    rule = SentinelRule(excluded_longitudes=(), excluded_ids=(5,))
    report = load_casts(str(survey_dir), CastSelection.all_up_to(9), sentinel_rule=rule)
    assert list(report.casts) == [1, 2, 9]
    assert report.excluded == [5]


def test_load_casts_invalid_storage(tmp_path):
    with pytest.raises(NotADirectoryError):
        load_casts(str(tmp_path / "missing"), CastSelection.all_up_to(3))


def test_read_cast_record_not_increasing(tmp_path):
    write_cast_csv(tmp_path, 4, depth=(2.0, 6.0, 4.0))
    with pytest.raises(MalformedRecordError) as excinfo:
        read_cast_record(str(tmp_path), 4)
    assert excinfo.value.field == DEPTH.label


def test_read_cast_record_missing_position(tmp_path):
    file_path = os.path.join(tmp_path, "Cast004.csv")
    with open(file_path, "w") as file:
        file.write("% Latitude, 26.5\ndepth,u,v\n2,1,1\n4,2,2\n")
    with pytest.raises(MalformedRecordError) as excinfo:
        read_cast_record(str(tmp_path), 4)
    assert excinfo.value.field == LONGITUDE.label


def test_read_cast_record_positions_from_columns(tmp_path):
    write_cast_csv(tmp_path, 4, longitude=-78.75, latitude=25.25, metadata=False)
    cast = read_cast_record(str(tmp_path), 4)
    assert cast.longitude == pytest.approx(-78.75)
    assert cast.latitude == pytest.approx(25.25)


def test_read_cast_record_drops_missing_rows(tmp_path):
    file_path = os.path.join(tmp_path, "Cast004.csv")
    with open(file_path, "w") as file:
        file.write("% Longitude, -79\n% Latitude, 26\ndepth,u,v\n2,1,1\n4,,2\n6,3,3\n")
    cast = read_cast_record(str(tmp_path), 4)
    np.testing.assert_allclose(cast.depth, [2.0, 6.0])
    np.testing.assert_allclose(cast.eastward_velocity, [1.0, 3.0])


def test_read_cast_record_depth_from_pressure(tmp_path):
    pressure = (10.0, 50.0, 100.0)
    write_cast_csv(tmp_path, 4, depth=None, pressure=pressure)
    cast = read_cast_record(str(tmp_path), 4)
    np.testing.assert_allclose(cast.depth, pressure, rtol=0.02)
    assert np.all(np.diff(cast.depth) > 0)
    np.testing.assert_allclose(cast.pressure, pressure)


def test_read_cast_record_mat(tmp_path):
    savemat(
        os.path.join(tmp_path, "Cast007.mat"),
        {
            "lon": -79.0,
            "lat": 26.0,
            "depth": np.array([2.0, 4.0, 6.0]),
            "u": np.array([0.1, 0.2, 0.3]),
            "v": np.array([0.3, 0.2, 0.1]),
            "pressure": np.array([2.0, 4.0, 6.1]),
        },
    )
    cast = read_cast_record(str(tmp_path), 7)
    assert cast.longitude == pytest.approx(-79.0)
    np.testing.assert_allclose(cast.northward_velocity, [0.3, 0.2, 0.1])
    np.testing.assert_allclose(cast.pressure, [2.0, 4.0, 6.1])


def test_find_cast_record_prefers_csv(tmp_path):
    write_cast_csv(tmp_path, 7)
    savemat(os.path.join(tmp_path, "Cast007.mat"), {"lon": -79.0})
    assert find_cast_record(str(tmp_path), 7).endswith("Cast007.csv")


def test_read_cast_record_corrupt_mat(tmp_path):
    with open(os.path.join(tmp_path, "Cast007.mat"), "w") as file:
        file.write("not a mat file")
    with pytest.raises(MalformedRecordError):
        read_cast_record(str(tmp_path), 7)


def test_build_cast_length_mismatch():
    fields = {
        LONGITUDE.label: -79.0,
        LATITUDE.label: 26.0,
        DEPTH.label: np.array([2.0, 4.0, 6.0]),
        EASTWARD_VELOCITY.label: np.array([0.1, 0.2]),
        NORTHWARD_VELOCITY.label: np.array([0.1, 0.2, 0.3]),
    }
    with pytest.raises(MalformedRecordError) as excinfo:
        build_cast(4, fields)
    assert excinfo.value.field == EASTWARD_VELOCITY.label


def test_build_cast_non_constant_position():
    fields = {
        LONGITUDE.label: np.array([-79.0, -79.5]),
        LATITUDE.label: 26.0,
        DEPTH.label: np.array([2.0, 4.0]),
        EASTWARD_VELOCITY.label: np.array([0.1, 0.2]),
        NORTHWARD_VELOCITY.label: np.array([0.1, 0.2]),
    }
    with pytest.raises(MalformedRecordError) as excinfo:
        build_cast(4, fields)
    assert excinfo.value.field == LONGITUDE.label


@pytest.mark.parametrize("token,expected", [
    ("all:4", [1, 2, 3, 4]),
    ("ALL:2", [1, 2]),
    ("2,5,9", [2, 5, 9]),
    ("9 5", [9, 5]),
])
def test_cast_selection_parse(token, expected):
    assert CastSelection.parse(token).ids() == expected


def test_cast_selection_all_with_separate_bound():
    assert CastSelection.parse("all", upper_bound=3).ids() == [1, 2, 3]


@pytest.mark.parametrize("token", ["all", "all:0", "0,2", "-1"])
def test_cast_selection_parse_invalid(token):
    with pytest.raises(ValueError):
        CastSelection.parse(token)


def test_load_casts_no_usable_rows_is_malformed(tmp_path):
    file_path = os.path.join(tmp_path, "Cast006.csv")
    with open(file_path, "w") as file:
        file.write("% Longitude, -79\n% Latitude, 26\ndepth,u,v\n2,1,\n4,,2\n")
    write_cast_csv(tmp_path, 5)
    report = load_casts(str(tmp_path), CastSelection.explicit([5, 6]))
    assert report.malformed == [6]
    assert list(report.casts) == [5]
    assert report.results[1].error.field == DEPTH.label


def test_read_cast_record_single_usable_row(tmp_path):
    file_path = os.path.join(tmp_path, "Cast006.csv")
    with open(file_path, "w") as file:
        file.write("% Longitude, -79\n% Latitude, 26\ndepth,u,v\n2,1,1\n4,,2\n")
    cast = read_cast_record(str(tmp_path), 6)
    np.testing.assert_allclose(cast.depth, [2.0])


@pytest.mark.parametrize("depth", [(0.0, 2.0, 4.0), (-2.0, 2.0, 4.0)])
def test_read_cast_record_non_positive_depth(tmp_path, depth):
    write_cast_csv(tmp_path, 4, depth=depth)
    with pytest.raises(MalformedRecordError) as excinfo:
        read_cast_record(str(tmp_path), 4)
    assert excinfo.value.field == DEPTH.label
