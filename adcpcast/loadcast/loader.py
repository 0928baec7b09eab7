from adcpcast.constants.constants import *
from adcpcast.dataclasses.dataclasses import (Cast,
                                              CastBatchReport,
                                              CastLoadResult,
                                              CastSelection,
                                              LoadStatus,
                                              SentinelRule,
                                              cast_label)
from adcpcast.exceptions.exceptions import NotFoundError, MalformedRecordError
from adcpcast.loadcast.text import load_file_text
from adcpcast.loadcast.matlab import load_file_mat

from os import path
import logging

import gsw
import numpy as np
import polars as pl
from scipy.io.matlab import MatReadError

logger = logging.getLogger("adcpcast")


def find_cast_record(storage_root: str, cast_id: int) -> str:
    """
    Finds the record file backing a cast.

    Parameters
    ----------
    storage_root : str
        Directory holding the cast records.
    cast_id : int
        Identifier of the cast.

    Returns
    -------
    str
        Path of the first existing ``Cast###`` record, ``.csv`` before ``.mat``.

    Raises
    ------
    NotFoundError
        When no record exists for the cast.
    """
    stem = CAST_FILE_TEMPLATE.format(cast_id=cast_id)
    for marker in RECORD_FILE_MARKERS:
        candidate = path.join(storage_root, stem + marker)
        if path.isfile(candidate):
            return candidate
    raise NotFoundError(cast_id=cast_id, location=storage_root)


def read_cast_record(storage_root: str, cast_id: int) -> Cast:
    """
    Reads and validates the record of one cast.

    Parameters
    ----------
    storage_root : str
        Directory holding the cast records.
    cast_id : int
        Identifier of the cast.

    Returns
    -------
    Cast
        The validated cast.

    Raises
    ------
    NotFoundError
        When no record exists for the cast.
    MalformedRecordError
        When the record cannot be read or a required field is missing or invalid.
    """
    cast_file_path = find_cast_record(storage_root, cast_id)
    try:
        if cast_file_path.endswith(MAT_FILE_MARKER):
            fields = load_file_mat(cast_file_path)
        else:
            fields = load_file_text(cast_file_path)
    except (pl.exceptions.PolarsError, MatReadError, ValueError, TypeError):
        raise MalformedRecordError(cast_id=cast_id, field=path.basename(cast_file_path),
                                   reason=ERROR_CORRUPT_RECORD)
    return build_cast(cast_id, fields, source=cast_file_path)


def build_cast(cast_id: int, fields: dict, source: str | None = None) -> Cast:
    r"""
    Validates raw record fields and builds a :class:`Cast`.

    Parameters
    ----------
    cast_id : int
        Identifier of the cast.
    fields : dict
        Record fields keyed by internal label, as returned by the record readers.
    source : str, optional
        The file the fields were read from.

    Returns
    -------
    Cast
        The validated cast.

    Raises
    ------
    MalformedRecordError
        When a required field is missing, sample fields differ in length, a position is not
        constant, no row carries depth and both velocities, or depth samples are not
        positive and strictly increasing.

    Notes
    -----
    When a record has no depth samples but carries pressure, depth is derived from pressure and
    latitude with the TEOS-10 ``gsw.z_from_p`` function, :math:`d = -z(p, \phi)`.

    Rows where depth or either velocity is missing are dropped before the depth checks.
    """
    longitude = _position(cast_id, fields, LONGITUDE.label)
    latitude = _position(cast_id, fields, LATITUDE.label)
    for label in VELOCITY_FIELDS:
        if _samples(fields, label) is None:
            raise MalformedRecordError(cast_id=cast_id, field=label)

    pressure = _samples(fields, PRESSURE.label)
    depth = _samples(fields, DEPTH.label)
    if depth is None:
        if pressure is None:
            raise MalformedRecordError(cast_id=cast_id, field=DEPTH.label)
        depth = -gsw.z_from_p(pressure, latitude)
        logger.debug(f"{cast_label(cast_id)} - depth derived from pressure")

    columns = {DEPTH.label: depth}
    for label in VELOCITY_FIELDS + [PRESSURE.label]:
        samples = _samples(fields, label)
        if samples is None:
            continue
        if len(samples) != len(depth):
            raise MalformedRecordError(cast_id=cast_id, field=label, reason=ERROR_LENGTH_MISMATCH)
        columns[label] = samples

    keep = np.isfinite(columns[DEPTH.label])
    for label in VELOCITY_FIELDS:
        keep &= np.isfinite(columns[label])
    columns = {label: samples[keep] for label, samples in columns.items()}

    if len(columns[DEPTH.label]) == 0:
        raise MalformedRecordError(cast_id=cast_id, field=DEPTH.label, reason=ERROR_NO_USABLE_SAMPLES)
    if np.any(columns[DEPTH.label] <= 0):
        raise MalformedRecordError(cast_id=cast_id, field=DEPTH.label, reason=ERROR_NON_POSITIVE_DEPTH)
    if np.any(np.diff(columns[DEPTH.label]) <= 0):
        raise MalformedRecordError(cast_id=cast_id, field=DEPTH.label, reason=ERROR_NOT_INCREASING)

    return Cast(
        cast_id=cast_id,
        longitude=longitude,
        latitude=latitude,
        depth=columns[DEPTH.label],
        eastward_velocity=columns[EASTWARD_VELOCITY.label],
        northward_velocity=columns[NORTHWARD_VELOCITY.label],
        pressure=columns.get(PRESSURE.label),
        source=source,
    )


def _samples(fields: dict, label: str) -> np.ndarray | None:
    value = fields.get(label)
    if value is None:
        return None
    samples = np.atleast_1d(np.asarray(value, dtype=np.float64))
    if samples.size == 0 or np.all(np.isnan(samples)):
        return None
    return samples


def _position(cast_id: int, fields: dict, label: str) -> float:
    samples = _samples(fields, label)
    if samples is None:
        raise MalformedRecordError(cast_id=cast_id, field=label)
    values = np.unique(samples[~np.isnan(samples)])
    if len(values) > 1:
        raise MalformedRecordError(cast_id=cast_id, field=label, reason=ERROR_NON_CONSTANT_POSITION)
    return float(values[0])


def load_casts(
        storage_root: str,
        selection: CastSelection,
        sentinel_rule: SentinelRule | None = None,
) -> CastBatchReport:
    """
    Loads every requested cast from storage into a batch report.

    Parameters
    ----------
    storage_root : str
        Directory holding the ``Cast###`` records.
    selection : CastSelection
        The requested cast identifiers.
    sentinel_rule : SentinelRule, optional
        Placeholder convention, defaults to ``SentinelRule()`` (longitude 0 or cast 1).

    Returns
    -------
    CastBatchReport
        One result per requested cast, in selection order. ``report.casts`` holds the valid,
        non-sentinel casts keyed by id in ascending order.

    Raises
    ------
    NotADirectoryError
        When ``storage_root`` is not a directory.

    Notes
    -----
    A missing or malformed record never stops the batch: the error is logged with its context and
    stored on the cast's result. Sentinel casts are excluded without a warning.

    Examples
    --------
    .. code-block:: python

        report = load_casts("survey/adcp", CastSelection.all_up_to(9))
        for cast_id, cast in report.casts.items():
            print(cast_id, cast.longitude, cast.latitude)
    """
    if not path.isdir(storage_root):
        raise NotADirectoryError(f"Cast storage {storage_root} is not a directory")
    sentinel_rule = sentinel_rule or SentinelRule()
    report = CastBatchReport()
    for cast_id in selection.ids():
        if cast_id in sentinel_rule.excluded_ids:
            logger.debug(f"{cast_label(cast_id)} - excluded as placeholder cast")
            report.results.append(CastLoadResult(cast_id=cast_id, status=LoadStatus.EXCLUDED))
            continue
        try:
            cast = read_cast_record(storage_root, cast_id)
        except NotFoundError as error:
            logger.warning(error)
            report.results.append(CastLoadResult(cast_id=cast_id, status=LoadStatus.NOT_FOUND, error=error))
            continue
        except MalformedRecordError as error:
            logger.warning(error)
            report.results.append(CastLoadResult(cast_id=cast_id, status=LoadStatus.MALFORMED, error=error))
            continue
        if sentinel_rule.is_sentinel(cast_id, cast.longitude):
            logger.debug(f"{cast.label} - excluded as placeholder cast")
            report.results.append(CastLoadResult(cast_id=cast_id, status=LoadStatus.EXCLUDED, cast=cast))
            continue
        logger.info(f"{cast.label} - loaded {len(cast.depth)} samples from {path.basename(cast.source)}")
        report.results.append(CastLoadResult(cast_id=cast_id, status=LoadStatus.LOADED, cast=cast))
    return report
