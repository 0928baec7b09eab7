import pytest

from adcpcast.aggregate.aggregate import cross_section, depth_averaged_field, depth_slice, rotation_center
from adcpcast.dataclasses.dataclasses import DepthGrid, RotationCenter, VectorField
from adcpcast.exceptions.exceptions import DegenerateFieldError, InvalidDepthError
from adcpcast.regularize.regularize import regularize_casts
from conftest import make_cast

GRID = DepthGrid(start=2, step=2, end=12)


@pytest.fixture
def casts():
    return {
        9: make_cast(9, longitude=-79.1, latitude=26.6, depth=(2, 5, 11), u=(-0.2, -0.5, -1.1),
                     v=(-1.0, -0.7, -0.1)),
        5: make_cast(5, longitude=-79.3, latitude=26.4, depth=(2, 4, 6, 8), u=(0.1, 0.2, 0.3, 0.4),
                     v=(1.0, 0.8, 0.6, 0.4)),
        7: make_cast(7, longitude=-79.2, latitude=26.5, depth=(6, 8), u=(0.5, 0.7), v=(0.0, 0.2)),
    }


@pytest.fixture
def profiles(casts):
    return regularize_casts(casts, GRID)


def test_depth_slice_returns_casts_with_data(profiles, casts):
    field = depth_slice(profiles, casts, 4, GRID)
    assert field.depth == 4
    assert field.cast_ids == [5, 9]
    assert field.points[0] == pytest.approx((-79.3, 26.4, 0.2, 0.8))
    assert field.points[1] == pytest.approx((-79.1, 26.6, -0.4, -0.8))


def test_depth_slice_positions_match_casts(profiles, casts):
    field = depth_slice(profiles, casts, 8, GRID)
    assert field.cast_ids == [5, 7, 9]
    for cast_id, (lon, lat, _, _) in zip(field.cast_ids, field.points):
        assert (lon, lat) == (casts[cast_id].longitude, casts[cast_id].latitude)


def test_depth_slice_beyond_every_cast_is_empty(profiles, casts):
    assert depth_slice(profiles, casts, 12, GRID).is_empty()
    assert len(depth_slice(profiles, casts, 40, GRID)) == 0


@pytest.mark.parametrize("depth", [3, 5.5, 0, -4])
def test_depth_slice_off_grid(profiles, casts, depth):
    with pytest.raises(InvalidDepthError):
        depth_slice(profiles, casts, depth, GRID)


def test_depth_slice_to_df(profiles, casts):
    df = depth_slice(profiles, casts, 6, GRID).to_df()
    assert df.height == 3
    assert df.get_column("cast_id").to_list() == [5, 7, 9]
    assert df.get_column("depth").unique().to_list() == [6.0]


def test_depth_averaged_field(profiles, casts):
    field = depth_averaged_field(profiles, casts, 2, 4)
    assert field.depth == 3
    assert field.cast_ids == [5, 9]
    assert field.points[0][2:] == pytest.approx((0.15, 0.9))


def test_depth_averaged_field_ignores_missing_depths(profiles, casts):
    field = depth_averaged_field(profiles, casts, 6, 12)
    # Cast 5 only reaches 8 m, cast 7 spans 6 to 8 m
    assert field.cast_ids == [5, 7, 9]
    assert field.points[0][2] == pytest.approx(0.35)
    assert field.points[1][2] == pytest.approx(0.6)


def test_depth_averaged_field_invalid_range(profiles, casts):
    with pytest.raises(ValueError):
        depth_averaged_field(profiles, casts, 10, 2)


def test_cross_section_orders_by_longitude(profiles, casts):
    section = cross_section(profiles, casts, "northward")
    assert section.columns == ["depth", "Cast005", "Cast007", "Cast009"]
    assert section.get_column("depth").to_list() == [2, 4, 6, 8, 10, 12]
    assert section.get_column("Cast007").to_list()[:2] == [None, None]
    assert section.get_column("Cast005").to_list()[0] == pytest.approx(1.0)


def test_cross_section_invalid_component(profiles, casts):
    with pytest.raises(ValueError):
        cross_section(profiles, casts, "upward")


def test_rotation_center_symmetric_rotation():
    lon, lat, d = -79.0, 26.0, 0.1
    field = VectorField(
        depth=10,
        points=[
            (lon + d, lat, 0.0, 1.0),
            (lon, lat + d, -1.0, 0.0),
            (lon - d, lat, 0.0, -1.0),
            (lon, lat - d, 1.0, 0.0),
        ],
        cast_ids=[2, 3, 4, 5],
    )
    center = rotation_center(field)
    assert isinstance(center, RotationCenter)
    assert center.longitude == pytest.approx(lon, abs=1e-6)
    assert center.latitude == pytest.approx(lat, abs=1e-6)


def test_rotation_center_is_a_plain_pair():
    field = VectorField(depth=4, points=[(-79.0, 26.0, 0.2, 0.5)], cast_ids=[5])
    longitude, latitude = rotation_center(field)
    assert (longitude, latitude) == pytest.approx((-79.0, 26.0))


def test_rotation_center_zero_circulation():
    field = VectorField(
        depth=4,
        points=[(-79.0, 26.0, 0.5, 0.0), (-79.2, 26.1, -0.5, 0.0)],
        cast_ids=[5, 6],
    )
    with pytest.raises(DegenerateFieldError) as excinfo:
        rotation_center(field)
    assert excinfo.value.depth == 4


def test_rotation_center_empty_field():
    with pytest.raises(DegenerateFieldError):
        rotation_center(VectorField(depth=4))


def test_rotation_center_cancelling_northward_flow():
    # opposite flanks of the same eddy, signed northward sum is zero
    field = VectorField(
        depth=4,
        points=[(-79.0, 26.0, 0.0, 1.0), (-79.2, 26.0, 0.0, -1.0)],
        cast_ids=[5, 6],
    )
    center = rotation_center(field)
    assert center.longitude == pytest.approx(-79.1)
    assert center.latitude == pytest.approx(26.0)
