from adcpcast.constants.constants import *

import numpy as np
from scipy.io import loadmat


def load_file_mat(cast_file_path: str) -> dict[str, np.ndarray]:
    """
    Loads the fields of a MATLAB cast record.

    Parameters
    ----------
    cast_file_path : str
        The file path to the ``.mat`` cast record.

    Returns
    -------
    dict[str, np.ndarray]
        Record variables keyed by internal label, flattened to float arrays.
    """
    mat = loadmat(cast_file_path, squeeze_me=True)
    fields = {}
    for name, value in mat.items():
        if name.startswith("__"):
            continue
        label = FIELD_ALIASES.get(name.strip().lower())
        if label and label not in fields:
            fields[label] = np.atleast_1d(np.asarray(value, dtype=np.float64)).ravel()
    return fields
