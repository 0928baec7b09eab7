from adcpcast.aggregate import aggregate
from adcpcast.constants.constants import *
from adcpcast.dataclasses.dataclasses import (Cast,
                                              CastBatchReport,
                                              CastSelection,
                                              DepthGrid,
                                              RegularizedProfile,
                                              RotationCenter,
                                              SentinelRule,
                                              VectorField)
from adcpcast.exceptions.exceptions import NoCastsError
from adcpcast.loadcast.loader import load_casts
from adcpcast.regularize.regularize import regularize_casts
from adcpcast.utils import utils

from typing import Any
import logging

import polars as pl

logger = logging.getLogger("adcpcast")


class Survey:
    """
    Load the casts of an ADCP survey and initialize a Survey object.

    Parameters
    ----------
    storage_root : str
        Directory holding the ``Cast###.csv`` / ``Cast###.mat`` records.
    selection : CastSelection | str | list[int]
        The casts to load. A string is parsed with :meth:`CastSelection.parse` (``"all:9"``,
        ``"2,5,9"``), a list of ids is an explicit selection.
    sentinel_rule : SentinelRule, optional
        Placeholder convention, defaults to ``SentinelRule()`` (longitude 0 or cast 1).

    Raises
    ------
    NotADirectoryError
        When ``storage_root`` is not a directory.

    Examples
    --------
    .. code-block:: python

        survey = Survey('survey/adcp', 'all:30')
        survey.regularize(start=2, step=2)
        field = survey.depth_slice(50)
        center = survey.rotation_center(50)

    """

    _report: CastBatchReport = None
    _grid: DepthGrid = None
    _profiles: dict[int, RegularizedProfile] = None

    def __init__(
            self,
            storage_root: str,
            selection: CastSelection | str | list[int],
            sentinel_rule: SentinelRule = None,
    ):
        if isinstance(selection, str):
            selection = CastSelection.parse(selection)
        elif not isinstance(selection, CastSelection):
            selection = CastSelection.explicit(selection)
        self._storage_root = storage_root
        self._report = load_casts(storage_root, selection, sentinel_rule=sentinel_rule)
        self._profiles = {}

    def get_report(self) -> CastBatchReport:
        """Returns the per-cast load results."""
        return self._report

    def get_casts(self) -> dict[int, Cast]:
        """Returns the valid casts keyed by id in ascending order."""
        return self._report.casts

    def get_grid(self) -> DepthGrid | None:
        return self._grid

    def get_profiles(self) -> dict[int, RegularizedProfile]:
        self.assert_profiles_not_empty(Survey.get_profiles.__name__)
        return self._profiles

    def regularize(
            self,
            start: float = DEFAULT_GRID_START,
            step: float = DEFAULT_GRID_STEP,
            end: float | None = None,
    ) -> dict[int, RegularizedProfile]:
        """
        Resamples every valid cast onto a shared depth grid.

        Parameters
        ----------
        start : float, default 2.0
            First grid depth in meters.
        step : float, default 2.0
            Grid spacing in meters.
        end : float, optional
            Deepest grid depth. Defaults to the deepest sample of the survey rounded up onto the grid.

        Returns
        -------
        dict[int, RegularizedProfile]
            Profiles keyed by cast id.

        Raises
        ------
        ValueError
            When ``end`` lies above the deepest sample of the survey.

        Notes
        -----
        Regularizing again with a different grid replaces the stored profiles.
        """
        casts = self.get_casts()
        if end is None:
            self._grid = DepthGrid.covering(casts.values(), start=start, step=step)
        else:
            self._grid = DepthGrid(start=start, step=step, end=end)
        self._profiles = regularize_casts(casts, self._grid)
        return self._profiles

    def depth_slice(self, depth: float) -> VectorField:
        """
        Returns the vector field at one grid depth.

        Raises
        ------
        NoCastsError
            When no cast has been regularized.
        InvalidDepthError
            When the depth is not on the grid.
        """
        self.assert_profiles_not_empty(Survey.depth_slice.__name__)
        return aggregate.depth_slice(self._profiles, self.get_casts(), depth, self._grid)

    def depth_averaged_field(self, top: float, bottom: float) -> VectorField:
        """
        Returns the vector field averaged between two depths, inclusive.

        Raises
        ------
        NoCastsError
            When no cast has been regularized.
        """
        self.assert_profiles_not_empty(Survey.depth_averaged_field.__name__)
        return aggregate.depth_averaged_field(self._profiles, self.get_casts(), top, bottom)

    def cross_section(self, component: str = "eastward") -> pl.DataFrame:
        """
        Returns one velocity component of every cast as a depth by cast table ordered by longitude.

        Raises
        ------
        NoCastsError
            When no cast has been regularized.
        """
        self.assert_profiles_not_empty(Survey.cross_section.__name__)
        return aggregate.cross_section(self._profiles, self.get_casts(), component)

    def rotation_center(self, depth: float) -> RotationCenter:
        """
        Estimates the rotation center of the vector field at one grid depth.

        This is a heuristic, see :func:`adcpcast.aggregate.aggregate.rotation_center`.

        Raises
        ------
        NoCastsError
            When no cast has been regularized.
        DegenerateFieldError
            When no cast has data at the depth or none of them has northward flow.
        """
        return aggregate.rotation_center(self.depth_slice(depth))

    def get_df(self, pandas=False) -> pl.DataFrame | Any:
        """
        Returns the regularized data of every cast as one long table.

        Parameters
        ----------
        pandas : bool, default False
            If True returns a pandas df, if False returns a polars DataFrame.

        Returns
        -------
        pl.DataFrame | pd.DataFrame
            One row per cast and grid depth with the cast id, position, depth and both velocity
            components. Grid depths without data hold nulls.

        Notes
        -----
        Changes made on the returned table are not reflected in the Survey.
        """
        self.assert_profiles_not_empty(Survey.get_df.__name__)
        casts = self.get_casts()
        data = pl.concat(
            [
                profile.to_df().with_columns(
                    pl.lit(casts[cast_id].longitude, dtype=LONGITUDE.pl_unit).alias(LONGITUDE.label),
                    pl.lit(casts[cast_id].latitude, dtype=LATITUDE.pl_unit).alias(LATITUDE.label),
                )
                for cast_id, profile in self._profiles.items()
            ],
            how="vertical",
        ).select(
            CAST_ID.label,
            LONGITUDE.label,
            LATITUDE.label,
            DEPTH.label,
            EASTWARD_VELOCITY.label,
            NORTHWARD_VELOCITY.label,
        )
        if pandas:
            return data.to_pandas(use_pyarrow_extension_array=True)
        return data

    def save_to_csv(self, output_file: str, null_value: str | None = "") -> pl.DataFrame:
        """
        Relabels the regularized data with export labels and saves it to a CSV file.

        Parameters
        ----------
        output_file : str
            The output CSV file path. An existing file is overwritten.
        null_value : str, default ""
            The value written for grid depths without data.

        See Also
        --------
        utils.save_to_csv : Utility function used to save the data to a CSV file.
        """
        return utils.save_to_csv(self.get_df(), output_file=output_file, null_value=null_value)

    def assert_profiles_not_empty(self, func: str) -> bool:
        """
        Checks that at least one cast has been regularized.

        Raises
        ------
        NoCastsError
            When no cast has been regularized.
        """
        if not self._profiles:
            raise NoCastsError(func=func)
        return True
