"""
Constants used throughout the ADCPCast package.

This module contains the column labels, record naming conventions, grid
defaults, error messages and warning messages used by the ADCPCast package.
"""
import polars as pl

from adcpcast.dataclasses.dataclasses import SampleFeature

# --------------
# Column labels
# --------------

CAST_ID = SampleFeature(label="cast_id", export_label="Cast_ID", unit="", pl_unit=pl.Int32)
LONGITUDE = SampleFeature(label="longitude", export_label="longitude", unit="decimal_degrees", pl_unit=pl.Float64)
LATITUDE = SampleFeature(label="latitude", export_label="latitude", unit="decimal_degrees", pl_unit=pl.Float64)
DEPTH = SampleFeature(label="depth", export_label="Depth_(m)", unit="m", pl_unit=pl.Float64)
PRESSURE = SampleFeature(label="pressure", export_label="Pressure_(dbar)", unit="dbar", pl_unit=pl.Float64)
EASTWARD_VELOCITY = SampleFeature(label="eastward_velocity", export_label="Eastward_Velocity_(m/s)", unit="m/s",
                                  pl_unit=pl.Float64)
NORTHWARD_VELOCITY = SampleFeature(label="northward_velocity", export_label="Northward_Velocity_(m/s)", unit="m/s",
                                   pl_unit=pl.Float64)

ALL_SAMPLE_FEATURES = [
    # Identification and position
    CAST_ID, LONGITUDE, LATITUDE,

    # Vertical coordinate
    DEPTH, PRESSURE,

    # Velocity
    EASTWARD_VELOCITY, NORTHWARD_VELOCITY,
]

RELABEL_DICT = {feature.label: feature.export_label for feature in ALL_SAMPLE_FEATURES}

EXPORT_COLUMN_ORDER = [feature.export_label for feature in ALL_SAMPLE_FEATURES]

# Record field aliases, lowercase, mapped to internal labels
FIELD_ALIASES: dict[str, str] = {
    "lon": LONGITUDE.label,
    "longitude": LONGITUDE.label,
    "lat": LATITUDE.label,
    "latitude": LATITUDE.label,
    "depth": DEPTH.label,
    "depth (meter)": DEPTH.label,
    "depth_(m)": DEPTH.label,
    "pressure": PRESSURE.label,
    "pressure (decibar)": PRESSURE.label,
    "pressure_(dbar)": PRESSURE.label,
    "u": EASTWARD_VELOCITY.label,
    "eastward_velocity": EASTWARD_VELOCITY.label,
    "eastward velocity (meters per second)": EASTWARD_VELOCITY.label,
    "eastward_velocity_(m/s)": EASTWARD_VELOCITY.label,
    "v": NORTHWARD_VELOCITY.label,
    "northward_velocity": NORTHWARD_VELOCITY.label,
    "northward velocity (meters per second)": NORTHWARD_VELOCITY.label,
    "northward_velocity_(m/s)": NORTHWARD_VELOCITY.label,
}

POSITION_FIELDS = [LONGITUDE.label, LATITUDE.label]
VELOCITY_FIELDS = [EASTWARD_VELOCITY.label, NORTHWARD_VELOCITY.label]

# ------------------------------------
# Record naming
# ------------------------------------
CAST_FILE_TEMPLATE: str = "Cast{cast_id:03d}"
"""str: Stem of a cast record file, formatted with the integer cast id."""

CSV_FILE_MARKER: str = ".csv"
"""str: Marker for delimited text cast records."""

MAT_FILE_MARKER: str = ".mat"
"""str: Marker for MATLAB cast records."""

RECORD_FILE_MARKERS: list[str] = [CSV_FILE_MARKER, MAT_FILE_MARKER]
"""list[str]: Record formats in lookup order."""

METADATA_PREFIX: str = "%"
"""str: Prefix of metadata lines in delimited text cast records."""

NULL_VALUES: list[str] = ["#N/A", "null", "NaN", "nan", ""]
"""list[str]: Cell values read as missing."""

# ------------------------------------
# Depth grid defaults
# ------------------------------------
DEFAULT_GRID_START: float = 2.0
"""float: First depth of the shared grid, in meters."""

DEFAULT_GRID_STEP: float = 2.0
"""float: Spacing of the shared grid, in meters."""

GRID_TOLERANCE: float = 1e-9
"""float: Tolerance when matching a requested depth onto the grid, in grid steps."""

CIRCULATION_TOLERANCE: float = 1e-12
"""float: Net circulation at or below this magnitude is treated as zero."""

VELOCITY_COMPONENTS: dict[str, str] = {
    "eastward": EASTWARD_VELOCITY.label,
    "northward": NORTHWARD_VELOCITY.label,
}
"""dict[str, str]: Velocity component names accepted by cross sections."""

# ------------------------------------
# Error messages
# ------------------------------------
ERROR_LENGTH_MISMATCH: str = "Record field length does not match depth samples"
ERROR_NOT_INCREASING: str = "Depth samples are not strictly increasing"
ERROR_NON_POSITIVE_DEPTH: str = "Depth samples must be positive"
ERROR_NO_USABLE_SAMPLES: str = "Record has no row with depth and both velocity components"
ERROR_CORRUPT_RECORD: str = "Record is corrupted or incomplete and could not be read"
ERROR_NON_CONSTANT_POSITION: str = "Record position varies within the cast"
ERROR_DEGENERATE_EMPTY: str = "Vector field is empty, rotation center is undefined"
ERROR_DEGENERATE_ZERO: str = "Vector field has no northward flow, rotation center is undefined"

# ------------------------------------
# Warning messages
# ------------------------------------
WARNING_SKIPPED_CAST: str = "Cast skipped"
"""str: Warning message for a cast dropped from a batch."""

# ------------------------------------
# Library logger name
# ------------------------------------
LIB_LOGGER_NAME = "adcpcast"
"""str: Logger name for the ADCPCast library."""

# ------------------------------------
# Default output files
# ------------------------------------
DEFAULT_OUTPUT_FILE = "adcpcast_data.csv"
"""str: Name of the default output file."""

DEFAULT_LOG_FILE = "adcpcast.log"
"""str: Name of the log file written by the command line interface."""
