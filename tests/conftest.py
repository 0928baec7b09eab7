import os

import numpy as np
import pytest

from adcpcast.dataclasses.dataclasses import Cast


def write_cast_csv(storage_root, cast_id, longitude=-79.25, latitude=26.5, depth=(2.0, 4.0, 6.0),
                   u=(1.0, 2.0, 3.0), v=(0.5, 0.25, 0.0), pressure=None, metadata=True):
    """Writes a ``Cast###.csv`` record and returns its path."""
    file_path = os.path.join(storage_root, f"Cast{cast_id:03d}.csv")
    columns = {}
    if depth is not None:
        columns["depth"] = depth
    if u is not None:
        columns["u"] = u
    if v is not None:
        columns["v"] = v
    if pressure is not None:
        columns["pressure"] = pressure
    length = max(len(values) for values in columns.values())
    if not metadata:
        columns["lon"] = [longitude] * length
        columns["lat"] = [latitude] * length
    with open(file_path, "w") as file:
        if metadata:
            file.write(f"% Cast, {cast_id:03d}\n")
            file.write(f"% Longitude, {longitude}\n")
            file.write(f"% Latitude, {latitude}\n")
        file.write(",".join(columns) + "\n")
        for row in zip(*columns.values()):
            file.write(",".join(str(value) for value in row) + "\n")
    return file_path


def make_cast(cast_id, longitude=-79.25, latitude=26.5, depth=(2.0, 4.0, 6.0), u=(1.0, 2.0, 3.0),
              v=(0.5, 0.25, 0.0)):
    return Cast(
        cast_id=cast_id,
        longitude=longitude,
        latitude=latitude,
        depth=np.asarray(depth, dtype=np.float64),
        eastward_velocity=np.asarray(u, dtype=np.float64),
        northward_velocity=np.asarray(v, dtype=np.float64),
    )


@pytest.fixture
def survey_dir(tmp_path):
    """Survey with placeholder casts 1 (by id) and 2 (longitude 0) and valid casts 5 and 9."""
    write_cast_csv(tmp_path, 1, longitude=-79.5)
    write_cast_csv(tmp_path, 2, longitude=0)
    write_cast_csv(tmp_path, 5, longitude=-79.3, latitude=26.4, depth=(2.0, 4.0, 6.0, 8.0),
                   u=(0.1, 0.2, 0.3, 0.4), v=(1.0, 0.8, 0.6, 0.4))
    write_cast_csv(tmp_path, 9, longitude=-79.1, latitude=26.6, depth=(2.0, 5.0, 11.0),
                   u=(-0.2, -0.5, -1.1), v=(-1.0, -0.7, -0.1))
    return tmp_path
