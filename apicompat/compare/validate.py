# Copyright Red Hat
#
# apicompat/compare/validate.py - Validate assemblies against a baseline
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top level API compatibility validation of left and right assemblies.
"""
from typing import List, Optional, Sequence
from os.path import exists
import logging

from apicompat import ApiCompatConfigError

from ._loader import build_rules
from .discovery import (
    RegexStringTransformer,
    get_assembly_references,
    get_metadata_information,
)
from .engine import ApiComparer, CompatResults
from .options import CompatOptions
from .provider import SurfaceFileProvider, SymbolProvider
from .runner import ApiCompatRunner, WorkItem
from .suppression import SuppressionEngine, generate_suppression_file
from .symbols import MetadataInformation

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _transformer(patterns) -> Optional[RegexStringTransformer]:
    return RegexStringTransformer(patterns) if patterns else None


def _collect(
    assemblies: Sequence[str],
    references: Optional[Sequence[Sequence[str]]],
    transformer: Optional[RegexStringTransformer],
) -> List[MetadataInformation]:
    metadata = []
    for index, assembly in enumerate(assemblies):
        metadata.extend(
            get_metadata_information(
                assembly, get_assembly_references(references, index), transformer
            )
        )
    return metadata


def create_suppression_engine(options: CompatOptions) -> SuppressionEngine:
    """
    Construct the suppression engine for a run.

    When a suppression file is to be generated and does not exist yet the
    engine starts empty. Generating a suppression file records every
    difference as a baseline.

    :param options: The run options.
    :type options: ``CompatOptions``
    :rtype: ``SuppressionEngine``
    """
    suppression_file = options.suppression_file
    if options.generate_suppression_file and not (
        suppression_file and exists(suppression_file)
    ):
        suppression_file = None
    return SuppressionEngine(
        suppression_file,
        no_warn=options.no_warn,
        baseline_all_errors=options.generate_suppression_file,
    )


# pylint: disable=too-many-arguments
def validate_assemblies(
    left_assemblies: Sequence[str],
    right_assemblies: Sequence[str],
    options: Optional[CompatOptions] = None,
    left_references: Optional[Sequence[Sequence[str]]] = None,
    right_references: Optional[Sequence[Sequence[str]]] = None,
    provider: Optional[SymbolProvider] = None,
) -> CompatResults:
    """
    Compare ``left_assemblies`` against ``right_assemblies``.

    Each input may be a surface file, a directory or a glob. With
    ``options.create_work_item_per_assembly`` the i-th left input is
    compared with the i-th right input; otherwise all left inputs are
    merged and compared with all right inputs merged.

    :param left_assemblies: The left (baseline) inputs.
    :type left_assemblies: ``Sequence[str]``
    :param right_assemblies: The right (candidate) inputs.
    :type right_assemblies: ``Sequence[str]``
    :param options: The run options.
    :type options: ``Optional[CompatOptions]``
    :param left_references: Reference sets for the left inputs.
    :type left_references: ``Optional[Sequence[Sequence[str]]]``
    :param right_references: Reference sets for the right inputs.
    :type right_references: ``Optional[Sequence[Sequence[str]]]``
    :param provider: The symbol provider; defaults to ``SurfaceFileProvider``.
    :type provider: ``Optional[SymbolProvider]``
    :returns: The unsuppressed differences.
    :rtype: ``CompatResults``
    :raises: ``ApiCompatConfigError`` if the inputs do not pair up in per
             assembly mode.
    """
    options = options or CompatOptions()

    if options.create_work_item_per_assembly and len(left_assemblies) != len(
        right_assemblies
    ):
        raise ApiCompatConfigError(
            "Creating a work item per assembly requires the same number of "
            f"left and right inputs ({len(left_assemblies)} != "
            f"{len(right_assemblies)})"
        )

    suppression_engine = create_suppression_engine(options)
    runner = ApiCompatRunner(
        provider or SurfaceFileProvider(),
        ApiComparer(build_rules(options)),
        suppression_engine,
        jobs=options.jobs,
    )

    left_transformer = _transformer(options.left_transformation_patterns)
    right_transformer = _transformer(options.right_transformation_patterns)

    if options.create_work_item_per_assembly:
        for index, (left, right) in enumerate(zip(left_assemblies, right_assemblies)):
            runner.enqueue_work_item(
                WorkItem(
                    get_metadata_information(
                        left,
                        get_assembly_references(left_references, index),
                        left_transformer,
                    ),
                    get_metadata_information(
                        right,
                        get_assembly_references(right_references, index),
                        right_transformer,
                    ),
                    options,
                )
            )
    else:
        runner.enqueue_work_item(
            WorkItem(
                _collect(left_assemblies, left_references, left_transformer),
                _collect(right_assemblies, right_references, right_transformer),
                options,
            )
        )

    results = runner.execute_work_items()

    if options.generate_suppression_file:
        generate_suppression_file(suppression_engine, options.suppression_file)

    return results


__all__ = ["create_suppression_engine", "validate_assemblies"]
