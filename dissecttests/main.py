# Copyright (C) 2022 Aaron Gibson (eulersidcrisis@yahoo.com)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
"""main.py.

Main entrypoint for running the bsondissect test suites.
"""
import os
import sys
import unittest
import argparse
# Import the long-running tests from the various modules here.
from dissecttests.modules.stress_tests import (
    DeeplyNestedDocumentTests, MemoryBoundTests
)


def run():
    """Main test runner."""
    parser = argparse.ArgumentParser(description="Run the bsondissect tests.")
    parser.add_argument('--run-all', action='store_true', help=(
        "Include the tests that and take more resources and time to run."))
    parser.add_argument('-v', '--verbose', action='count', default=1,
                        help="Increase output verbosity.")
    args = parser.parse_args()

    loader = unittest.defaultTestLoader
    tests_dir = os.path.join(
        os.path.dirname(os.path.dirname(os.path.realpath(__file__))), 'tests')
    test_suite = unittest.TestSuite()
    test_suite.addTests(loader.discover(
        tests_dir, pattern='*_test*.py', top_level_dir=tests_dir))

    if args.run_all:
        # Add the 'long-running' tests here.
        for tc in [DeeplyNestedDocumentTests, MemoryBoundTests]:
            test_suite.addTests(loader.loadTestsFromTestCase(tc))

    runner = unittest.TextTestRunner(verbosity=args.verbose)
    result = runner.run(test_suite)
    sys.exit(0 if result.wasSuccessful() else 1)


if __name__ == '__main__':
    run()
