from adcpcast.constants.constants import *
import polars as pl
import sys
from os import path, getcwd


def save_to_csv(data: pl.DataFrame, output_file: str, null_value: str | None):
    """
    Renames the columns of the cast data table based on a predefined mapping and saves the
    data to the specified CSV file.

    Parameters
    ----------
    data : pl.DataFrame
        The cast data table.
    output_file : str
        The output CSV file path.
    null_value : str
        The value that will fill blank cells in the data.

    Returns
    -------
    pl.DataFrame
        The relabelled and reordered table that was written.
    """

    def relabel_cast_data(label: str) -> str:
        return RELABEL_DICT.get(label, label)

    renamed_data = data.rename(relabel_cast_data)

    # Known columns first, in export order
    present_columns = [
        col for col in EXPORT_COLUMN_ORDER if col in renamed_data.columns
    ]
    missing_columns = [
        col for col in renamed_data.columns if col not in present_columns
    ]
    reordered_data = renamed_data.select(present_columns + missing_columns)
    reordered_data.write_csv(output_file, null_value=null_value)
    return reordered_data


def get_cwd():
    """
    Gets the current working directory.

    Returns
    -------
    str
        The current working directory, or the directory of the executable when frozen.
    """
    return path.dirname(sys.executable) if getattr(sys, "frozen", False) else getcwd()
