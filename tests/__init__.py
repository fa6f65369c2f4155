# Copyright Red Hat
#
# tests/__init__.py - API compatibility test package
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
import logging
import os

log = logging.getLogger()
log.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
file_handler = logging.FileHandler("test.log")
file_handler.setFormatter(formatter)
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
log.addHandler(file_handler)
log.addHandler(console_handler)

TESTS_ROOT = os.path.dirname(os.path.abspath(__file__))


class MockArgs(object):
    debug = None
    verbose = 0
    version = False
    json = False
    config = None
    left = None
    right = None
    left_references = None
    right_references = None
    left_transformation_patterns = None
    right_transformation_patterns = None
    strict_mode = None
    no_warn = None
    exclude_attributes_files = None
    create_work_item_per_assembly = False
    jobs = None
    suppression_file = None
    generate_suppression_file = False
