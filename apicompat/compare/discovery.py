# Copyright Red Hat
#
# apicompat/compare/discovery.py - API compatibility input discovery
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Discovery of surface files and construction of assembly metadata
descriptors from command line inputs.
"""
from typing import List, Optional, Sequence, Tuple
from os.path import basename, dirname, isdir, join
import fnmatch
import logging
import re
import os

from apicompat import ApiCompatConfigError

from .symbols import MetadataInformation

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: File name patterns yielded when an input names a directory.
SURFACE_FILE_PATTERNS = ("*.json", "*.json.zst", "*.json.xz")

#: Suffixes removed from a surface file name to form the assembly name.
_SURFACE_SUFFIXES = (".json.zst", ".json.xz", ".json")


def assembly_name(path: str) -> str:
    """
    Return the assembly name for the surface file at ``path``: the file
    name without its surface file extensions.

    :param path: Path to a surface file.
    :type path: ``str``
    :rtype: ``str``
    """
    name = basename(path)
    for suffix in _SURFACE_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return os.path.splitext(name)[0]


def _list_matching(directory: str, patterns: Sequence[str]) -> List[str]:
    try:
        names = os.listdir(directory or ".")
    except OSError as err:
        _log_debug("Cannot list '%s': %s", directory, err)
        return []
    return sorted(
        join(directory, name)
        for name in names
        if any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)
        and not isdir(join(directory, name))
    )


def get_files_from_path(path: str) -> List[str]:
    """
    Expand an input path to the list of surface files it names.

    A directory yields the surface files it contains. A file name
    containing ``*`` is treated as a glob pattern within its directory.
    Anything else is returned unchanged as a literal path.

    :param path: A file, directory or glob path.
    :type path: ``str``
    :returns: Matching file paths, sorted.
    :rtype: ``List[str]``
    """
    if isdir(path):
        files = _list_matching(path, SURFACE_FILE_PATTERNS)
        _log_debug("Found %d surface files in directory '%s'", len(files), path)
        return files

    filename = basename(path)
    if "*" in filename:
        files = _list_matching(dirname(path), (filename,))
        _log_debug("Glob '%s' matched %d files", path, len(files))
        return files

    return [path]


class RegexStringTransformer:
    """
    Apply an ordered list of regular expression substitutions to a string.
    """

    def __init__(self, patterns: Sequence[Tuple[str, str]]):
        """
        Initialise a new ``RegexStringTransformer``.

        :param patterns: ``(pattern, replacement)`` pairs applied in order.
        :type patterns: ``Sequence[Tuple[str, str]]``
        :raises: ``ApiCompatConfigError`` if a pattern does not compile.
        """
        self._patterns = []
        for pattern, replacement in patterns:
            try:
                self._patterns.append((re.compile(pattern), replacement))
            except re.error as err:
                raise ApiCompatConfigError(
                    f"Invalid transformation pattern '{pattern}': {err}"
                ) from err

    def __len__(self):
        return len(self._patterns)

    def transform(self, value: str) -> str:
        """
        Return ``value`` with every substitution applied in sequence.

        :param value: The input string.
        :type value: ``str``
        :rtype: ``str``
        """
        for regex, replacement in self._patterns:
            value = regex.sub(replacement, value)
        return value


def parse_transformation_pattern(value: str) -> Tuple[str, str]:
    """
    Split a ``PATTERN=REPLACEMENT`` command line value.

    The value is split at the last ``=`` so that patterns may contain
    ``=`` characters.

    :param value: The argument value.
    :type value: ``str``
    :rtype: ``Tuple[str, str]``
    :raises: ``ValueError`` if ``value`` contains no ``=``.
    """
    if "=" not in value:
        raise ValueError(f"Transformation pattern must be PATTERN=REPLACEMENT: {value}")
    pattern, replacement = value.rsplit("=", 1)
    return pattern, replacement


def get_assembly_references(
    references: Optional[Sequence[Sequence[str]]], index: int
) -> Optional[Tuple[str, ...]]:
    """
    Return the reference set for the input at ``index``.

    When fewer reference sets than inputs are given the first set is
    shared by the remaining inputs.

    :param references: Reference sets, one per input.
    :type references: ``Optional[Sequence[Sequence[str]]]``
    :param index: The input index.
    :type index: ``int``
    :returns: The reference paths or ``None``.
    :rtype: ``Optional[Tuple[str, ...]]``
    """
    if not references:
        return None
    if len(references) > index:
        return tuple(references[index])
    return tuple(references[0])


def get_metadata_information(
    path: str,
    references: Optional[Sequence[str]] = None,
    transformer: Optional[RegexStringTransformer] = None,
) -> List[MetadataInformation]:
    """
    Build metadata descriptors for every surface file named by ``path``.

    :param path: A file, directory or glob path.
    :type path: ``str``
    :param references: Reference paths used to resolve the surfaces.
    :type references: ``Optional[Sequence[str]]``
    :param transformer: Optional transformer deriving the assembly id.
    :type transformer: ``Optional[RegexStringTransformer]``
    :rtype: ``List[MetadataInformation]``
    """
    return [
        MetadataInformation(
            assembly_name=assembly_name(assembly),
            assembly_id=transformer.transform(assembly) if transformer else assembly,
            full_path=assembly,
            references=tuple(references or ()),
        )
        for assembly in get_files_from_path(path)
    ]


__all__ = [
    "RegexStringTransformer",
    "SURFACE_FILE_PATTERNS",
    "assembly_name",
    "get_assembly_references",
    "get_files_from_path",
    "get_metadata_information",
    "parse_transformation_pattern",
]
