import logging
import sys
from argparse import ArgumentParser
from os import path

import colorlog
from rich.console import Console
from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table, box
from rich.status import Status
from rich_argparse import RichHelpFormatter

from adcpcast.Survey import Survey
from adcpcast.aggregate.aggregate import rotation_center
from adcpcast.constants.constants import *
from adcpcast.dataclasses.dataclasses import CastSelection, LoadStatus, SentinelRule, VectorField, cast_label
from adcpcast.exceptions.exceptions import CastError, DegenerateFieldError
from adcpcast.utils.utils import get_cwd

console = Console()

STATUS_COLORS = {
    LoadStatus.LOADED: "green",
    LoadStatus.EXCLUDED: "yellow",
    LoadStatus.NOT_FOUND: "red",
    LoadStatus.MALFORMED: "red",
}

formatter = colorlog.ColoredFormatter(
    "%(log_color)s%(asctime)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d) - %(name)s",
    datefmt="%H:%M",
    reset=True,
    log_colors={
        "DEBUG": "white",
        "INFO": "cyan",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "red,bg_white",
    },
    secondary_log_colors={},
    style="%",
)


def run_default(
        storage_root,
        selection,
        start,
        step,
        end,
        depths,
        average,
        sentinel_rule,
        output_file,
        status_show,
):
    """
    Runs the default processing pipeline over a directory of cast records.

    Parameters
    ----------
    storage_root : str
        Directory holding the cast records.
    selection : CastSelection
        The casts to load.
    start : float
        First grid depth.
    step : float
        Grid spacing.
    end : float | None
        Deepest grid depth, None to cover the deepest sample.
    depths : list[float] | None
        Depths to report vector fields and rotation centers for.
    average : list[float] | None
        Top and bottom of a depth range to report a depth averaged field for.
    sentinel_rule : SentinelRule
        Placeholder convention.
    output_file : str
        The path to the output CSV file.
    status_show : bool
        Flag indicating whether to show the per-cast load status.

    Returns
    -------
    Survey
        The processed survey.
    """
    logger = logging.getLogger(LIB_LOGGER_NAME)
    with Status("Loading casts", spinner="earth", console=console):
        survey = Survey(storage_root, selection, sentinel_rule=sentinel_rule)
    report = survey.get_report()
    if status_show:
        console.print(generate_status_table(report))
    if not report.casts:
        raise CastError(message=f"No valid casts found in {storage_root}")

    with Status("Regularizing casts", spinner="earth", console=console):
        survey.regularize(start=start, step=step, end=end)
    grid = survey.get_grid()
    df = survey.save_to_csv(output_file, null_value="")
    console.print(
        Panel(
            Pretty(df.describe()),
            title="Regularized profiles",
            subtitle=f"Grid {grid.start}-{grid.end} m every {grid.step} m, "
                     f"casts {len(survey.get_profiles())}/{len(report.results)}",
        )
    )
    logger.info(f"Saved regularized profiles to {output_file}")

    for depth in depths or []:
        try:
            report_field(survey.depth_slice(depth), f"Depth {depth} m")
        except CastError as error:
            logger.error(error)
            console.print(str(error), style="red")
    if average:
        top, bottom = average
        report_field(survey.depth_averaged_field(top, bottom), f"Mean {top}-{bottom} m")
    return survey


def report_field(field: VectorField, title: str):
    """
    Prints a vector field and its rotation center estimate.

    Notes
    -----
    A degenerate field is reported, not raised, so the remaining depths still run.
    """
    table = Table(title=title, box=box.SQUARE)
    for column in ["Cast", "Longitude", "Latitude", "Eastward (m/s)", "Northward (m/s)"]:
        table.add_column(column)
    for cast_id, (lon, lat, u, v) in zip(field.cast_ids, field.points):
        table.add_row(cast_label(cast_id), f"{lon:.4f}", f"{lat:.4f}", f"{u:.3f}", f"{v:.3f}")
    console.print(table)
    try:
        center = rotation_center(field)
        console.print(f"Rotation center (heuristic): {center.longitude:.4f}, {center.latitude:.4f}")
    except DegenerateFieldError as error:
        logging.getLogger(LIB_LOGGER_NAME).warning(error)
        console.print(f"Rotation center undefined: {error}", style="yellow")


def generate_status_table(report):
    """
    Generates a status table displaying the load status of each requested cast.

    Parameters
    ----------
    report : CastBatchReport
        The load report of the survey.

    Returns
    -------
    rich.table.Table
        A rich Table object, green for loaded casts, yellow for placeholders and red for errors.
    """
    table = Table(box=box.SQUARE)
    table.add_column("Cast", width=10)
    table.add_column("Status")
    table.add_column("Detail")
    for result in report.results:
        color = STATUS_COLORS[result.status]
        detail = str(result.error) if result.error else ""
        table.add_row(
            cast_label(result.cast_id),
            f"[{color}]{result.status.value}[/{color}]",
            detail,
        )
    return table


def setup_logging(verbosity):
    """
    Sets up logging for the application.

    Parameters
    ----------
    verbosity : int
        The verbosity level for logging, -1 for errors only.

    Returns
    -------
    logging.Logger
        The configured logger.

    Notes
    -----
    Logs go to a colored console handler and to ``adcpcast.log`` in the working directory.
    """
    level = max(30 - (verbosity * 10), 10)
    logger = logging.getLogger(LIB_LOGGER_NAME)
    if logger.hasHandlers():
        logger.handlers.clear()
    logger.setLevel(level)
    logger.propagate = False
    console_log = colorlog.StreamHandler()
    console_log.setFormatter(formatter)
    console_log.setLevel(level)
    file_log = logging.FileHandler(path.join(get_cwd(), DEFAULT_LOG_FILE))
    file_log.setFormatter(
        logging.Formatter("%(asctime)s, %(levelname)-8s [%(filename)s:%(lineno)d] %(message)s", "%H:%M:%S")
    )
    file_log.setLevel(level)
    logger.addHandler(console_log)
    logger.addHandler(file_log)
    return logger


def build_parser():
    """
    Builds the argument parser for the command-line interface.

    Returns
    -------
    argparse.ArgumentParser
        The configured argument parser.
    """
    parser = ArgumentParser(
        description="ADCPCast", formatter_class=RichHelpFormatter
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    parser_default = subparsers.add_parser(
        "default",
        help="Run the default processing pipeline",
        formatter_class=RichHelpFormatter,
    )
    add_arguments(parser_default)
    return parser


def add_arguments(parser):
    """
    Adds arguments to the argument parser.

    Parameters
    ----------
    parser : argparse.ArgumentParser
        The argument parser to add arguments to.
    """
    parser.add_argument(
        "-i", "--input", type=str, default=None, help="Directory of cast records (default: working directory)"
    )
    parser.add_argument(
        "-c",
        "--casts",
        nargs="+",
        type=str,
        required=True,
        help="Casts to process, 'all:N' for casts 1 to N or a list of cast ids",
    )
    parser.add_argument("--start", type=float, default=DEFAULT_GRID_START, help="First grid depth (m)")
    parser.add_argument("--step", type=float, default=DEFAULT_GRID_STEP, help="Grid spacing (m)")
    parser.add_argument(
        "--end", type=float, default=None, help="Deepest grid depth (m), defaults to the deepest sample"
    )
    parser.add_argument(
        "--depth",
        nargs="*",
        type=float,
        default=None,
        help="Grid depths to report vector fields and rotation centers for",
    )
    parser.add_argument(
        "--average",
        nargs=2,
        type=float,
        default=None,
        metavar=("TOP", "BOTTOM"),
        help="Depth range to report a depth averaged vector field for",
    )
    parser.add_argument(
        "--sentinel-lon",
        nargs="*",
        type=float,
        default=[0.0],
        help="Longitudes marking placeholder casts",
    )
    parser.add_argument(
        "--sentinel-id",
        nargs="*",
        type=int,
        default=[1],
        help="Cast ids that are always placeholders",
    )
    parser.add_argument(
        "-o", "--output", type=str, default=str(DEFAULT_OUTPUT_FILE), help="Output file path"
    )
    parser.add_argument(
        "-s",
        "--show-status",
        action="store_true",
        help="Show per-cast load status",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        dest="verbosity",
        default=0,
        help="Verbose logger output to adcpcast.log (repeat for increased verbosity)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const=-1,
        default=0,
        dest="verbosity",
        help="Quiet output (show errors only)",
    )


def create_selection(args):
    """
    Creates the cast selection from command-line arguments.

    Parameters
    ----------
    args : argparse.Namespace
        The parsed command-line arguments.

    Returns
    -------
    CastSelection
        ``all:N`` as a single token selects casts 1 to N, anything else is an explicit id list.
    """
    if len(args.casts) == 1:
        return CastSelection.parse(args.casts[0])
    return CastSelection.explicit(args.casts)


def display_config(args):
    """
    Displays the configuration of the processing pipeline.

    Parameters
    ----------
    args : argparse.Namespace
        The parsed command-line arguments.
    """
    table = Table(title="Processing Pipeline Config")
    table.add_column("Argument", style="cyan", no_wrap=True)
    table.add_column("Value", style="magenta")
    for arg in vars(args):
        table.add_row(arg.replace("_", " ").title(), str(getattr(args, arg)))
    console.print(table)


def main(argv=None):
    """
    The main entry point for the application. Parses arguments and runs the processing pipeline.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "default":
        setup_logging(args.verbosity)
        display_config(args)
        try:
            run_default(
                storage_root=args.input or get_cwd(),
                selection=create_selection(args),
                start=args.start,
                step=args.step,
                end=args.end,
                depths=args.depth,
                average=args.average,
                sentinel_rule=SentinelRule(
                    excluded_longitudes=tuple(args.sentinel_lon),
                    excluded_ids=tuple(args.sentinel_id),
                ),
                output_file=args.output,
                status_show=args.show_status,
            )
        except (CastError, NotADirectoryError, ValueError) as error:
            logging.getLogger(LIB_LOGGER_NAME).error(error)
            console.print(str(error), style="white on red")
            sys.exit(1)
        sys.exit()


if __name__ == "__main__":
    main()
