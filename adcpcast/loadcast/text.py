from adcpcast.constants.constants import *

import numpy as np
import polars as pl


def load_file_text(cast_file_path: str) -> dict[str, np.ndarray | float | None]:
    """
    Loads the fields of a delimited text cast record.

    Parameters
    ----------
    cast_file_path : str
        The file path to the cast record.

    Returns
    -------
    dict[str, np.ndarray | float | None]
        Record fields keyed by internal label. Sample columns are float arrays; positions taken
        from metadata lines are scalars and win over position columns.

    Notes
    -----
    Lines starting with ``%`` are metadata, e.g. ``% Longitude, -79.25``. Column headers are matched
    case-insensitively against the known field aliases; unknown columns are ignored.
    """
    with open(cast_file_path) as file:
        record = pl.read_csv(
            file,
            comment_prefix=METADATA_PREFIX,
            null_values=NULL_VALUES,
            infer_schema_length=None,
        )
    renames = {}
    for column in record.columns:
        maps_to = FIELD_ALIASES.get(column.strip().lower())
        if maps_to and maps_to not in renames.values():
            renames[column] = maps_to
    record = record.select(
        pl.col(column).cast(pl.Float64, strict=False).alias(maps_to)
        for column, maps_to in renames.items()
    )
    fields = {label: record.get_column(label).to_numpy() for label in record.columns}
    for label, value in extract_metadata_text(cast_file_path).items():
        if value is not None:
            fields[label] = value
    return fields


def extract_metadata_text(cast_file_path: str) -> dict[str, float | None]:
    """
    Extracts position metadata from the ``%`` lines of a delimited text cast record.

    Parameters
    ----------
    cast_file_path : str
        The file path to the cast record.

    Returns
    -------
    dict[str, float | None]
        Longitude and/or latitude found in the metadata, None where the value is blank or invalid.
    """
    metadata = {}
    with open(cast_file_path, "r") as file:
        for line in file:
            if not line.startswith(METADATA_PREFIX):
                continue
            parts = line.lstrip(METADATA_PREFIX).strip().split(",")
            if len(parts) < 2:
                continue
            key = parts[0].strip().lower().removeprefix("start ")
            label = FIELD_ALIASES.get(key)
            if label not in POSITION_FIELDS:
                continue
            try:
                metadata[label] = float(parts[1].strip())
            except ValueError:
                metadata[label] = None
    return metadata
