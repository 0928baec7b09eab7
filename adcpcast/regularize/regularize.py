from adcpcast.constants.constants import *
from adcpcast.dataclasses.dataclasses import Cast, DepthGrid, RegularizedProfile
from adcpcast.exceptions.exceptions import (InsufficientDataError,
                                            InvalidDepthError,
                                            raise_warning_skipped_cast)

import logging

import numpy as np
import polars as pl

logger = logging.getLogger("adcpcast")


def grid_index(grid: DepthGrid, depth: float) -> int:
    """
    Returns k for a depth equal to ``grid.start + k * grid.step``.

    Raises
    ------
    InvalidDepthError
        When the depth is not on the grid or lies above its start. Depths past ``grid.end`` are
        valid and return an index past the last grid point.
    """
    k = (depth - grid.start) / grid.step
    nearest = round(k)
    if nearest < 0 or abs(k - nearest) > GRID_TOLERANCE:
        raise InvalidDepthError(depth=depth, start=grid.start, step=grid.step)
    return int(nearest)


def regularize_cast(cast: Cast, grid: DepthGrid) -> RegularizedProfile:
    r"""
    Resamples a cast's velocities onto the shared depth grid.

    Parameters
    ----------
    cast : Cast
        The cast to resample.
    grid : DepthGrid
        The depth grid shared by the run.

    Returns
    -------
    RegularizedProfile
        Velocities at every grid depth, null where the cast has no data.

    Raises
    ------
    InsufficientDataError
        When the cast has fewer than 2 depth samples.

    Notes
    -----
    For a grid depth :math:`z` with :math:`d_i \le z \le d_{i+1}` the value is the linear
    interpolation of the bracketing samples

    .. math::

        u(z) = u_i + (u_{i+1} - u_i) \frac{z - d_i}{d_{i+1} - d_i}

    Grid depths shallower than the first sample or deeper than the last are null. Nothing is
    extrapolated, and the result depends only on the cast samples and the grid.

    Examples
    --------
    .. code-block:: python

        profile = regularize_cast(cast, DepthGrid(start=2, step=2, end=8))
        profile.eastward_regular.to_list()
        # [1.0, 2.0, 3.0, None] for depth [2, 4, 6] and u [1, 2, 3]
    """
    if len(cast.depth) < 2:
        raise InsufficientDataError(cast_id=cast.cast_id, n_samples=len(cast.depth))
    depths = grid.depths
    in_range = (depths >= cast.min_depth) & (depths <= cast.max_depth)

    def interpolate(samples: np.ndarray, label: str) -> pl.Series:
        values = np.interp(depths, cast.depth, samples)
        return pl.Series(
            label,
            [float(value) if valid else None for value, valid in zip(values, in_range)],
            dtype=pl.Float64,
        )

    return RegularizedProfile(
        cast_id=cast.cast_id,
        depth_grid=depths,
        eastward_regular=interpolate(cast.eastward_velocity, EASTWARD_VELOCITY.label),
        northward_regular=interpolate(cast.northward_velocity, NORTHWARD_VELOCITY.label),
    )


def regularize_casts(casts: dict[int, Cast], grid: DepthGrid) -> dict[int, RegularizedProfile]:
    """
    Resamples every cast of a batch onto the shared depth grid.

    Parameters
    ----------
    casts : dict[int, Cast]
        Valid casts keyed by id.
    grid : DepthGrid
        The depth grid shared by the run.

    Returns
    -------
    dict[int, RegularizedProfile]
        Profiles keyed by cast id in ascending order. Casts with fewer than 2 samples are left out.

    Raises
    ------
    ValueError
        When the grid ends above the deepest sample of the batch.

    Notes
    -----
    A cast that cannot be interpolated is skipped with a warning; the rest of the batch is still
    processed.
    """
    deepest = max((cast.max_depth for cast in casts.values() if len(cast.depth)), default=grid.start)
    if grid.end < deepest:
        raise ValueError(f"Grid end {grid.end} lies above the deepest sample {deepest}")
    profiles = {}
    for cast_id in sorted(casts):
        try:
            profiles[cast_id] = regularize_cast(casts[cast_id], grid)
        except InsufficientDataError as error:
            raise_warning_skipped_cast(f"{WARNING_SKIPPED_CAST}: {error}")
    logger.info(f"Regularized {len(profiles)} of {len(casts)} casts onto {len(grid)} depths")
    return profiles
