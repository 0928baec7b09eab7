from adcpcast.constants.constants import *
from adcpcast.dataclasses.dataclasses import (Cast,
                                              DepthGrid,
                                              RegularizedProfile,
                                              RotationCenter,
                                              VectorField,
                                              cast_label)
from adcpcast.exceptions.exceptions import DegenerateFieldError
from adcpcast.regularize.regularize import grid_index

import logging

import numpy as np
import polars as pl

logger = logging.getLogger("adcpcast")


def depth_slice(
        profiles: dict[int, RegularizedProfile],
        casts: dict[int, Cast],
        depth: float,
        grid: DepthGrid,
) -> VectorField:
    """
    Collects the velocity vectors of every cast at one grid depth.

    Parameters
    ----------
    profiles : dict[int, RegularizedProfile]
        Regularized profiles keyed by cast id.
    casts : dict[int, Cast]
        The casts the profiles were built from, for their positions.
    depth : float
        Target depth, ``grid.start + k * grid.step`` for a non-negative integer k.
    grid : DepthGrid
        The grid the profiles were regularized onto.

    Returns
    -------
    VectorField
        One ``(longitude, latitude, eastward, northward)`` entry per cast with data at the depth,
        ordered by cast id. Casts whose profile does not reach the depth are left out, and a depth
        past the end of the grid gives an empty field.

    Raises
    ------
    InvalidDepthError
        When the depth is not on the grid.
    """
    index = grid_index(grid, depth)
    field = VectorField(depth=float(depth))
    for cast_id in sorted(profiles):
        profile = profiles[cast_id]
        if index >= len(profile.depth_grid):
            continue
        eastward = profile.eastward_regular[index]
        northward = profile.northward_regular[index]
        if eastward is None or northward is None:
            continue
        cast = casts[cast_id]
        field.points.append((cast.longitude, cast.latitude, eastward, northward))
        field.cast_ids.append(cast_id)
    logger.debug(f"Depth {depth} - {len(field)} of {len(profiles)} casts have data")
    return field


def depth_averaged_field(
        profiles: dict[int, RegularizedProfile],
        casts: dict[int, Cast],
        top: float,
        bottom: float,
) -> VectorField:
    """
    Averages each cast's regularized velocities over a depth range.

    Parameters
    ----------
    profiles : dict[int, RegularizedProfile]
        Regularized profiles keyed by cast id.
    casts : dict[int, Cast]
        The casts the profiles were built from, for their positions.
    top : float
        Shallowest depth of the range, inclusive.
    bottom : float
        Deepest depth of the range, inclusive.

    Returns
    -------
    VectorField
        Mean vector of every cast with data inside the range, at the range midpoint depth. Grid
        depths without data do not count towards the mean.

    Raises
    ------
    ValueError
        When ``top`` lies below ``bottom``.
    """
    if top > bottom:
        raise ValueError(f"Range top {top} lies below range bottom {bottom}")
    field = VectorField(depth=(top + bottom) / 2)
    for cast_id in sorted(profiles):
        profile = profiles[cast_id]
        in_range = pl.Series((profile.depth_grid >= top) & (profile.depth_grid <= bottom))
        eastward = profile.eastward_regular.filter(in_range).mean()
        northward = profile.northward_regular.filter(in_range).mean()
        if eastward is None or northward is None:
            continue
        cast = casts[cast_id]
        field.points.append((cast.longitude, cast.latitude, float(eastward), float(northward)))
        field.cast_ids.append(cast_id)
    return field


def cross_section(
        profiles: dict[int, RegularizedProfile],
        casts: dict[int, Cast],
        component: str = "eastward",
) -> pl.DataFrame:
    """
    Lays one velocity component of every cast side by side, ordered west to east.

    Parameters
    ----------
    profiles : dict[int, RegularizedProfile]
        Regularized profiles keyed by cast id.
    casts : dict[int, Cast]
        The casts the profiles were built from, for their longitudes.
    component : str, default "eastward"
        ``"eastward"`` or ``"northward"``.

    Returns
    -------
    pl.DataFrame
        A ``depth`` column followed by one column per cast, named like ``Cast005``, ordered by
        ascending longitude with ties broken by cast id. Null marks grid depths without data.

    Raises
    ------
    ValueError
        When the component is unknown.
    """
    if component not in VELOCITY_COMPONENTS:
        raise ValueError(f"Invalid component {component}, expected one of {list(VELOCITY_COMPONENTS)}")
    ordered = sorted(profiles, key=lambda cast_id: (casts[cast_id].longitude, cast_id))
    if not ordered:
        return pl.DataFrame(schema={DEPTH.label: DEPTH.pl_unit})
    columns = [pl.Series(DEPTH.label, profiles[ordered[0]].depth_grid, dtype=DEPTH.pl_unit)]
    for cast_id in ordered:
        profile = profiles[cast_id]
        series = profile.eastward_regular if component == "eastward" else profile.northward_regular
        columns.append(series.alias(cast_label(cast_id)))
    return pl.DataFrame(columns)


def rotation_center(field: VectorField) -> RotationCenter:
    r"""
    Estimates the point a vector field circulates around.

    This is a heuristic, directionally informative only. It is sensitive to how the casts are
    distributed and to outliers, and it is not a vorticity calculation.

    Parameters
    ----------
    field : VectorField
        The vectors to estimate from, typically a depth slice.

    Returns
    -------
    RotationCenter
        Estimated longitude and latitude in decimal degrees.

    Raises
    ------
    DegenerateFieldError
        When the field is empty or carries no northward flow.

    Notes
    -----
    Positions :math:`(\lambda_i, \phi_i)` are converted to radians. The eastward component is
    corrected for meridian convergence, :math:`u_i' = u_i \cos\phi_i`, while the northward
    component :math:`v_i` is used as is. The net circulation components are the signed sums

    .. math::

        C_x = \sum_i u_i', \qquad C_y = \sum_i v_i

    which are logged for inspection. The centroid is not weighted by the signed :math:`v_i`:
    opposite flanks of an eddy carry opposite northward velocities, so for any symmetric
    rotation :math:`C_y` vanishes and a signed centroid would never exist. The centroid is
    weighted by the northward magnitudes instead,

    .. math::

        W = \sum_i |v_i|, \qquad
        \lambda_c = \frac{\sum_i \lambda_i |v_i|}{W}, \qquad
        \phi_c = \frac{\sum_i \phi_i |v_i|}{W}

    converted back to degrees. A field whose northward velocities cancel therefore still has a
    center; only an empty field or one with no northward flow (:math:`W = 0`) is degenerate.
    """
    if field.is_empty():
        raise DegenerateFieldError(ERROR_DEGENERATE_EMPTY, depth=field.depth)
    points = np.asarray(field.points, dtype=np.float64)
    longitude = np.radians(points[:, 0])
    latitude = np.radians(points[:, 1])
    eastward_true = points[:, 2] * np.cos(latitude)
    weights = np.abs(points[:, 3])
    cx = eastward_true.sum()
    cy = points[:, 3].sum()
    total_weight = weights.sum()
    if not np.isfinite(total_weight) or total_weight <= CIRCULATION_TOLERANCE:
        raise DegenerateFieldError(ERROR_DEGENERATE_ZERO, depth=field.depth)
    center = RotationCenter(
        longitude=float(np.degrees((longitude * weights).sum() / total_weight)),
        latitude=float(np.degrees((latitude * weights).sum() / total_weight)),
    )
    logger.debug(f"Depth {field.depth} - circulation Cx={cx:.4f}, Cy={cy:.4f}, center {center}")
    return center
