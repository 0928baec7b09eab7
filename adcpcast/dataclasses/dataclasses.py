from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple
import math

import numpy as np
import polars as pl


def cast_label(cast_id: int) -> str:
    """Formats a cast identifier the way survey files and exports name it, e.g. ``Cast005``."""
    return f"Cast{cast_id:03d}"


class SampleFeature(NamedTuple):
    label: str
    export_label: str
    unit: str
    pl_unit: pl.DataType


@dataclass(frozen=True)
class Cast:
    """
    One vertical velocity profile captured at a fixed position.

    Attributes
    ----------
    cast_id : int
        Positive identifier, unique within a survey.
    longitude : float
        Longitude of the cast in decimal degrees.
    latitude : float
        Latitude of the cast in decimal degrees.
    depth : np.ndarray
        Positive, strictly increasing depth samples in meters.
    eastward_velocity : np.ndarray
        Eastward velocity samples, parallel to ``depth``.
    northward_velocity : np.ndarray
        Northward velocity samples, parallel to ``depth``.
    pressure : np.ndarray | None
        Pressure samples parallel to ``depth``, if the record carries them.
    source : str | None
        The file the cast was read from, if any.
    """

    cast_id: int
    longitude: float
    latitude: float
    depth: np.ndarray
    eastward_velocity: np.ndarray
    northward_velocity: np.ndarray
    pressure: np.ndarray | None = None
    source: str | None = None

    @property
    def label(self) -> str:
        return cast_label(self.cast_id)

    @property
    def min_depth(self) -> float:
        return float(self.depth.min())

    @property
    def max_depth(self) -> float:
        return float(self.depth.max())


@dataclass(frozen=True)
class SentinelRule:
    """
    Survey convention marking placeholder casts.

    The default reproduces the convention of the shipboard ADCP survey files: a cast with a
    longitude of exactly zero, or the first cast, is a placeholder and is never processed.

    Attributes
    ----------
    excluded_longitudes : tuple[float, ...]
        Longitudes that mark a cast as a placeholder.
    excluded_ids : tuple[int, ...]
        Cast identifiers that are always placeholders.
    """

    excluded_longitudes: tuple[float, ...] = (0.0,)
    excluded_ids: tuple[int, ...] = (1,)

    def is_sentinel(self, cast_id: int, longitude: float) -> bool:
        return cast_id in self.excluded_ids or longitude in self.excluded_longitudes


@dataclass(frozen=True)
class CastSelection:
    """
    The casts requested from storage, either every id from 1 up to ``upper_bound`` or an explicit list.

    Examples
    --------
    .. code-block:: python

        CastSelection.all_up_to(9).ids()      # [1, 2, ..., 9]
        CastSelection.parse("2,5,9").ids()    # [2, 5, 9]
        CastSelection.parse("all:9").ids()    # [1, 2, ..., 9]
    """

    upper_bound: int | None = None
    explicit_ids: tuple[int, ...] = ()

    @classmethod
    def all_up_to(cls, upper_bound: int) -> "CastSelection":
        if upper_bound < 1:
            raise ValueError(f"Upper bound must be at least 1, got {upper_bound}")
        return cls(upper_bound=upper_bound)

    @classmethod
    def explicit(cls, cast_ids) -> "CastSelection":
        cast_ids = tuple(int(cast_id) for cast_id in cast_ids)
        if not cast_ids:
            raise ValueError("An explicit cast selection needs at least one id")
        if any(cast_id < 1 for cast_id in cast_ids):
            raise ValueError(f"Cast ids must be positive, got {list(cast_ids)}")
        return cls(explicit_ids=cast_ids)

    @classmethod
    def parse(cls, token: str, upper_bound: int | None = None) -> "CastSelection":
        token = token.strip()
        if token.lower().startswith("all"):
            _, _, bound = token.partition(":")
            if bound:
                upper_bound = int(bound)
            if upper_bound is None:
                raise ValueError("Selection 'all' needs an upper bound, e.g. 'all:9'")
            return cls.all_up_to(upper_bound)
        return cls.explicit(part for part in token.replace(" ", ",").split(",") if part)

    def ids(self) -> list[int]:
        if self.upper_bound is not None:
            return list(range(1, self.upper_bound + 1))
        return list(self.explicit_ids)


@dataclass(frozen=True)
class DepthGrid:
    """
    Fixed-step depth grid shared by every cast of a processing run.

    Attributes
    ----------
    start : float
        First grid depth in meters.
    step : float
        Spacing between grid depths in meters.
    end : float
        Deepest grid depth in meters, inclusive.
    """

    start: float
    step: float
    end: float

    def __post_init__(self):
        if self.step <= 0:
            raise ValueError(f"Grid step must be positive, got {self.step}")
        if self.end < self.start:
            raise ValueError(f"Grid end {self.end} lies above grid start {self.start}")

    def __len__(self) -> int:
        return int(math.floor((self.end - self.start) / self.step + 1e-9)) + 1

    @property
    def depths(self) -> np.ndarray:
        return self.start + self.step * np.arange(len(self), dtype=np.float64)

    @classmethod
    def covering(cls, casts, start: float = 2.0, step: float = 2.0) -> "DepthGrid":
        """
        Builds the grid whose end is the deepest sample across ``casts`` rounded up onto the grid.

        Parameters
        ----------
        casts : Iterable[Cast]
            Casts the grid has to cover.
        start : float, default 2.0
            First grid depth.
        step : float, default 2.0
            Grid spacing.

        Returns
        -------
        DepthGrid
            The covering grid. Casts without samples are ignored, and with none left the grid
            holds ``start`` only.
        """
        max_depth = max((cast.max_depth for cast in casts if len(cast.depth)), default=start)
        steps = max(math.ceil((max_depth - start) / step - 1e-9), 0)
        return cls(start=start, step=step, end=start + steps * step)


class LoadStatus(Enum):
    LOADED = "loaded"
    EXCLUDED = "excluded"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"


@dataclass
class CastLoadResult:
    cast_id: int
    status: LoadStatus
    cast: Cast | None = None
    error: Exception | None = None


@dataclass
class CastBatchReport:
    """
    Per-cast outcome of a load, in selection order.

    Attributes
    ----------
    results : list[CastLoadResult]
        One entry per requested cast identifier.
    """

    results: list[CastLoadResult] = field(default_factory=list)

    def _ids_with(self, status: LoadStatus) -> list[int]:
        return [result.cast_id for result in self.results if result.status is status]

    @property
    def casts(self) -> dict[int, Cast]:
        loaded = [result for result in self.results if result.status is LoadStatus.LOADED]
        return {result.cast_id: result.cast for result in sorted(loaded, key=lambda r: r.cast_id)}

    @property
    def excluded(self) -> list[int]:
        return self._ids_with(LoadStatus.EXCLUDED)

    @property
    def not_found(self) -> list[int]:
        return self._ids_with(LoadStatus.NOT_FOUND)

    @property
    def malformed(self) -> list[int]:
        return self._ids_with(LoadStatus.MALFORMED)

    def summary(self) -> dict[LoadStatus, int]:
        return {status: len(self._ids_with(status)) for status in LoadStatus}


@dataclass(frozen=True)
class RegularizedProfile:
    """
    A cast's velocities resampled onto the shared depth grid.

    ``eastward_regular`` and ``northward_regular`` are Float64 polars series in which null marks
    a grid depth the cast has no data for. NaN never appears.
    """

    cast_id: int
    depth_grid: np.ndarray
    eastward_regular: pl.Series
    northward_regular: pl.Series

    def __post_init__(self):
        if not len(self.depth_grid) == len(self.eastward_regular) == len(self.northward_regular):
            raise ValueError(
                f"{cast_label(self.cast_id)} - regularized components do not match the depth grid length"
            )

    def to_df(self) -> pl.DataFrame:
        return pl.DataFrame(
            {
                "cast_id": pl.Series([self.cast_id] * len(self.depth_grid), dtype=pl.Int32),
                "depth": pl.Series(self.depth_grid, dtype=pl.Float64),
                "eastward_velocity": self.eastward_regular,
                "northward_velocity": self.northward_regular,
            }
        )


@dataclass
class VectorField:
    """
    Velocity vectors at one depth, one ``(longitude, latitude, eastward, northward)`` tuple per cast.

    Attributes
    ----------
    depth : float
        The depth the field was taken at, or the midpoint of an averaged depth range.
    points : list[tuple[float, float, float, float]]
        Vectors ordered by ascending cast id.
    cast_ids : list[int]
        Cast id of each point.
    """

    depth: float
    points: list[tuple[float, float, float, float]] = field(default_factory=list)
    cast_ids: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def is_empty(self) -> bool:
        return not self.points

    def to_df(self) -> pl.DataFrame:
        return pl.DataFrame(
            self.points,
            schema={
                "longitude": pl.Float64,
                "latitude": pl.Float64,
                "eastward_velocity": pl.Float64,
                "northward_velocity": pl.Float64,
            },
            orient="row",
        ).with_columns(
            pl.Series("cast_id", self.cast_ids, dtype=pl.Int32),
            pl.lit(self.depth, dtype=pl.Float64).alias("depth"),
        )


class RotationCenter(NamedTuple):
    longitude: float
    latitude: float
