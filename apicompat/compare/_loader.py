# Copyright Red Hat
#
# apicompat/compare/_loader.py - API compatibility rule loader
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Rule loader logic for API compatibility comparisons.
"""
import inspect
import importlib
import logging
from pathlib import Path
from importlib.util import find_spec
from typing import List, Optional

from apicompat.rules import Rule, RuleSettings, load_exclusion_files
import apicompat.rules as rule_pkg

from .options import CompatOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _find_rule_modules(path: Path):
    for file in sorted(path.glob("[a-zA-Z]*.py")):
        if not file.name.startswith("_") and file.name != "__init__.py":
            yield file.stem


def _import_rule_module(fqname: str):
    if not find_spec(fqname):
        return None  # pragma: no cover
    try:
        _log_debug("Importing rule module %s", fqname)
        return importlib.import_module(fqname)
    except (ModuleNotFoundError, ImportError, SyntaxError) as e:  # pragma: no cover
        _log_error("Error importing rule module %s: %s", fqname, e)
        return None


def _find_rules_in_module(module, base_class):
    members = inspect.getmembers(module, inspect.isclass)
    names_to_check = getattr(module, "__all__", [name for name, _ in members])

    return [
        cls
        for name, cls in members
        if name in names_to_check
        and not name.startswith("_")
        and issubclass(cls, base_class)
        and cls is not base_class
        and cls.__module__ == module.__name__
    ]


def load_rules(base_class=Rule):
    """
    Attempt to load public rules from ``rule_pkg`` that are subclasses of
    the class ``base_class``. Rules are returned in catalog order: by
    ``order`` and then by class name.
    """
    found_rules = []

    for path in map(Path, rule_pkg.__path__):
        for module_name in _find_rule_modules(path):
            fqname = f"{rule_pkg.__name__}.{module_name}"
            module = _import_rule_module(fqname)
            if module:
                found_rules.extend(_find_rules_in_module(module, base_class))

    return sorted(found_rules, key=lambda cls: (cls.order, cls.__name__))


def build_rules(options: Optional[CompatOptions] = None) -> List[Rule]:
    """
    Construct the rule catalog for a run.

    Every discovered rule not named in ``options.disable_rules`` is
    instantiated once with a shared ``RuleSettings`` built from
    ``options``.

    :param options: The run options.
    :type options: ``Optional[CompatOptions]``
    :returns: Rule instances in catalog order.
    :rtype: ``List[Rule]``
    :raises: ``ApiCompatNotFoundError`` or ``ApiCompatConfigError`` if an
             attribute exclusion file cannot be read.
    """
    options = options or CompatOptions()
    settings = RuleSettings(
        strict_mode=options.strict_mode,
        excluded_attributes=load_exclusion_files(options.exclude_attributes_files),
    )
    disabled = set(options.disable_rules)

    catalog = load_rules()
    rules = []
    for rule_class in catalog:
        if rule_class.name in disabled:
            _log_info("Rule '%s' disabled by configuration", rule_class.name)
            continue
        rules.append(rule_class(settings))

    for name in sorted(disabled - {rule_class.name for rule_class in catalog}):
        _log_warn("Ignoring unknown rule name '%s'", name)

    _log_debug("Loaded rules: %s", ", ".join(rule.name for rule in rules))
    return rules


__all__ = ["build_rules", "load_rules"]
