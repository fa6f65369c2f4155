# Copyright Red Hat
#
# apicompat/command.py - API compatibility command interface
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``apicompat.command`` module provides both the apicompat command
line interface infrastructure, and a simple procedural interface to the
``apicompat`` library modules.

The procedural interface is used by the ``apicompat`` command line tool,
and may be used by application programs, or interactively in the
Python shell by users who do not require all the features present
in the apicompat object API.
"""
from argparse import ArgumentParser, ArgumentTypeError
from os.path import basename
import logging
import sys

from apicompat import (
    APICOMPAT_DEBUG_COMPARE,
    APICOMPAT_DEBUG_SUPPRESSION,
    APICOMPAT_DEBUG_RUNNER,
    APICOMPAT_DEBUG_COMMAND,
    APICOMPAT_DEBUG_ALL,
    APICOMPAT_SUBSYSTEM_COMMAND,
    ApiCompatConfigError,
    SubsystemFilter,
    set_debug_mask,
    __version__,
)
from apicompat.config import APICOMPAT_CFG_PATH, ApiCompatConfig
from apicompat.compare import CompatOptions, CompatResults
from apicompat.compare.discovery import parse_transformation_pattern
from apicompat.compare.validate import validate_assemblies

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": APICOMPAT_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None


def _split_references(values):
    """
    Convert repeated comma separated reference arguments into a list of
    reference sets.
    """
    if not values:
        return None
    return [
        [ref.strip() for ref in value.split(",") if ref.strip()] for value in values
    ]


def _transformation_pattern(value):
    try:
        return parse_transformation_pattern(value)
    except ValueError as err:
        raise ArgumentTypeError(str(err)) from err


def print_results(results: CompatResults, json=False):
    """
    Print API compatibility results.

    :param results: The results to print.
    :type results: ``CompatResults``
    :param json: Print results as JSON.
    :type json: ``bool``
    """
    if json:
        print(results.json(pretty=True))
        return
    for line in results.lines():
        print(line)


def _validate_cmd(cmd_args):
    """
    API compatibility validation command handler.

    Compare the left inputs with the right inputs and report unsuppressed
    differences.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    config = ApiCompatConfig.from_file(cmd_args.config or APICOMPAT_CFG_PATH)
    options = CompatOptions.from_cmd_args(cmd_args, config=config)

    if options.generate_suppression_file and not options.suppression_file:
        _log_error("Option --generate-suppression-file requires --suppression-file")
        return 1

    if options.jobs < 1:
        _log_error("Invalid number of jobs: %d", options.jobs)
        return 1

    _log_debug_command("Running with options:\n%s", options)

    results = validate_assemblies(
        cmd_args.left,
        cmd_args.right,
        options,
        left_references=_split_references(cmd_args.left_references),
        right_references=_split_references(cmd_args.right_references),
    )

    print_results(results, json=cmd_args.json)

    if results:
        _log_info(results.summary())
        return 1
    return 0


def setup_logging(cmd_args):
    """
    Set up apicompat logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    apicompat_log = logging.getLogger("apicompat")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    apicompat_log.setLevel(level)
    if apicompat_log.hasHandlers():
        apicompat_log.handlers.clear()

    # Subsystem log filtering
    _apicompat_subsystem_filter = SubsystemFilter("apicompat")

    # Main console handler
    _CONSOLE_HANDLER = logging.StreamHandler(sys.stderr)

    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(_apicompat_subsystem_filter)

    apicompat_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down apicompat logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "compare": APICOMPAT_DEBUG_COMPARE,
        "suppression": APICOMPAT_DEBUG_SUPPRESSION,
        "runner": APICOMPAT_DEBUG_RUNNER,
        "command": APICOMPAT_DEBUG_COMMAND,
        "all": APICOMPAT_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_input_args(parser):
    parser.add_argument(
        "-l",
        "--left",
        metavar="PATH",
        action="append",
        required=True,
        help="Left (baseline) surface file, directory or glob. May be repeated",
    )
    parser.add_argument(
        "-r",
        "--right",
        metavar="PATH",
        action="append",
        required=True,
        help="Right (candidate) surface file, directory or glob. May be repeated",
    )
    parser.add_argument(
        "--left-references",
        metavar="PATHS",
        action="append",
        help="Comma separated reference paths for a left input. May be repeated "
        "once per input; the first set is used for inputs without one",
    )
    parser.add_argument(
        "--right-references",
        metavar="PATHS",
        action="append",
        help="Comma separated reference paths for a right input. May be repeated "
        "once per input; the first set is used for inputs without one",
    )
    parser.add_argument(
        "--left-transformation-pattern",
        dest="left_transformation_patterns",
        metavar="PATTERN=REPLACEMENT",
        type=_transformation_pattern,
        action="append",
        help="Regular expression substitution deriving left assembly ids",
    )
    parser.add_argument(
        "--right-transformation-pattern",
        dest="right_transformation_patterns",
        metavar="PATTERN=REPLACEMENT",
        type=_transformation_pattern,
        action="append",
        help="Regular expression substitution deriving right assembly ids",
    )


def _add_compare_args(parser):
    parser.add_argument(
        "--strict-mode",
        action="store_true",
        default=None,
        help="Also report declarations only present in the right surface",
    )
    parser.add_argument(
        "--no-warn",
        metavar="IDS",
        action="append",
        help="Semicolon separated diagnostic ids to never report",
    )
    parser.add_argument(
        "--exclude-attributes-file",
        dest="exclude_attributes_files",
        metavar="FILE",
        action="append",
        help="File listing attribute type ids to ignore. May be repeated",
    )
    parser.add_argument(
        "--create-work-item-per-assembly",
        action="store_true",
        help="Compare each left input with the right input at the same position",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        metavar="N",
        type=int,
        help="Number of comparisons to run concurrently",
    )


def _add_suppression_args(parser):
    parser.add_argument(
        "--suppression-file",
        metavar="FILE",
        help="Suppression file to read, or to write with "
        "--generate-suppression-file",
    )
    parser.add_argument(
        "--generate-suppression-file",
        action="store_true",
        help="Write every difference found to the suppression file",
    )


def main(args=None):
    """
    Main entry point for apicompat.
    """
    if args is None:
        args = sys.argv

    parser = ArgumentParser(
        description="API Compatibility Checker", prog=basename(args[0])
    )

    # Global arguments
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of apicompat",
        version=__version__,
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help=f"Configuration file (default: {APICOMPAT_CFG_PATH})",
    )
    parser.add_argument(
        "--json", action="store_true", help="Output differences as JSON"
    )

    _add_input_args(parser)
    _add_compare_args(parser)
    _add_suppression_args(parser)

    cmd_args = parser.parse_args(args[1:])

    status = 1

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    if cmd_args.debug:
        status = _validate_cmd(cmd_args)
    else:
        try:
            status = _validate_cmd(cmd_args)
        # pylint: disable=broad-except
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
        except ApiCompatConfigError as err:
            _log_error("Invalid configuration: %s", err)
        except Exception as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


if __name__ == "__main__":
    sys.exit(main(sys.argv))


# vim: set et ts=4 sw=4 :
