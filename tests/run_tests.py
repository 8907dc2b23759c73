#!/usr/bin/env python3
import os
import sys
import unittest


def run_tests(pattern: str = 'test_*.py') -> bool:
    """Discover and run the tests under tests/ (including tests/unit/)."""
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    sys.path.insert(0, project_root)

    loader = unittest.TestLoader()
    start_dir = os.path.dirname(os.path.abspath(__file__))
    suite = loader.discover(start_dir, pattern=pattern, top_level_dir=start_dir)

    runner = unittest.TextTestRunner(verbosity=2)
    return runner.run(suite).wasSuccessful()


if __name__ == "__main__":
    # Optional pattern, e.g. `python tests/run_tests.py test_rules.py`
    if not run_tests(*sys.argv[1:2]):
        sys.exit(1)
