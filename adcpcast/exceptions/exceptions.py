import logging
import warnings

from adcpcast.dataclasses.dataclasses import cast_label

logger = logging.getLogger("adcpcast")


class CastError(Exception):
    """
    Base exception class for cast-related errors.

    Parameters
    ----------
    message : str
        Explanation of the error.
    cast_id : int, optional
        Identifier of the cast which caused the error.
    """

    def __init__(self, message, cast_id=None):
        self.cast_id = cast_id
        full_message = f"{cast_label(cast_id)} - {message}" if cast_id is not None else message
        super().__init__(full_message)


class NotFoundError(CastError):
    """
    Exception raised when a requested cast has no backing record in storage.

    Parameters
    ----------
    cast_id : int
        Identifier of the requested cast.
    location : str, optional
        Where the record was looked for.
    """

    def __init__(self, cast_id, location=None):
        self.location = location
        message = f"No record found in {location}" if location else "No record found in storage"
        super().__init__(message, cast_id)


class MalformedRecordError(CastError):
    """
    Exception raised when a cast record is present but a required field is missing or invalid.

    Parameters
    ----------
    cast_id : int
        Identifier of the cast.
    field : str
        Name of the offending field.
    reason : str, optional
        What is wrong with the field.
    """

    def __init__(self, cast_id, field, reason="Record is missing required field"):
        self.field = field
        super().__init__(f"{reason} '{field}'", cast_id)


class InsufficientDataError(CastError):
    """
    Exception raised when a cast has fewer than two depth samples and cannot be interpolated.

    Parameters
    ----------
    cast_id : int
        Identifier of the cast.
    n_samples : int, optional
        Number of samples the cast has.
    """

    def __init__(self, cast_id, n_samples=None):
        self.n_samples = n_samples
        message = "At least 2 depth samples are required to interpolate"
        if n_samples is not None:
            message = f"{message}, found {n_samples}"
        super().__init__(message, cast_id)


class InvalidDepthError(CastError):
    """
    Exception raised when a requested depth does not lie on the depth grid.

    Parameters
    ----------
    depth : float
        The requested depth.
    start : float
        First grid depth.
    step : float
        Grid spacing.
    """

    def __init__(self, depth, start, step):
        self.depth = depth
        super().__init__(f"Depth {depth} is not on the grid start={start}, step={step}")


class DegenerateFieldError(CastError):
    """
    Exception raised when a rotation center cannot be estimated from a vector field.

    Parameters
    ----------
    message : str
        Explanation of why the field is degenerate.
    depth : float, optional
        Depth of the vector field.
    """

    def __init__(self, message, depth=None):
        self.depth = depth
        if depth is not None:
            message = f"Depth {depth} - {message}"
        super().__init__(message)


class NoCastsError(CastError):
    """
    Exception raised when a function that requires regularized casts is called on a survey without any.

    Parameters
    ----------
    func : str, optional
        Name of the calling function.
    """

    def __init__(self, func=None):
        super().__init__(f"Cannot call {func} on a survey with no regularized casts.")


def raise_warning_skipped_cast(message, cast_id=None):
    """
    Cast skipped warning function.

    Parameters
    ----------
    message : str
        Explanation of the warning.
    cast_id : int, default None
        Identifier of the skipped cast.
    """
    if cast_id is not None:
        message = f"{cast_label(cast_id)} - {message}"
    warnings.warn(message=message, category=RuntimeWarning)
    logger.warning(message)
