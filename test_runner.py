#!/usr/bin/env python3
"""
Test runner for the movie browser core.

Discovers tests/test_*.py, runs them and prints a per-module summary.
"""

import unittest
import sys
import os
import time
from io import StringIO

ROOT_DIR = os.path.dirname(os.path.abspath(__file__))
TESTS_DIR = os.path.join(ROOT_DIR, 'tests')

# Add src and tests to path
sys.path.insert(0, os.path.join(ROOT_DIR, 'src'))
sys.path.insert(0, TESTS_DIR)

MODULES = [
    ("models", "🎞️  Movie Records & View State"),
    ("error_classifier", "🚦 Error Classification"),
    ("utils", "🛠️  Configuration & HTTP Helpers"),
    ("debouncer", "⏳ Search Input Debouncing"),
    ("sequencer", "🔢 Request Sequencing"),
    ("movie_search", "🔍 Search Fetching"),
    ("category_fetcher", "📂 Category Bulk Load & Refresh"),
    ("transitions", "🔀 State Transitions"),
    ("store", "🗃️  View-State Store"),
]


def print_failures(title, marker, entries):
    if not entries:
        return
    print(f"\n{title}")
    print("-" * 40)
    for test, traceback in entries:
        print(f"{marker} {test}")
        print(f"   {traceback.strip()}")


def run_all_tests():
    """Run every test module and print a report."""

    print("🎬 Movie Browser Core - Test Suite")
    print("=" * 60)

    suite = unittest.TestLoader().discover(TESTS_DIR, pattern='test_*.py', top_level_dir=TESTS_DIR)

    stream = StringIO()
    runner = unittest.TextTestRunner(stream=stream, verbosity=2, buffer=True)

    print(f"📍 Running tests from: {TESTS_DIR}")
    print("-" * 60)

    start_time = time.time()
    result = runner.run(suite)
    elapsed = time.time() - start_time

    print("📊 TEST RESULTS")
    print("-" * 60)
    print(f"⏱️  Total time: {elapsed:.2f} seconds")
    print(f"🧪 Tests run: {result.testsRun}")
    print(f"✅ Passed: {result.testsRun - len(result.failures) - len(result.errors)}")
    print(f"❌ Failed: {len(result.failures)}")
    print(f"💥 Errors: {len(result.errors)}")
    print(f"⏭️  Skipped: {len(result.skipped)}")

    print_failures("🚨 FAILURES:", "❌", result.failures)
    print_failures("💥 ERRORS:", "💥", result.errors)

    print("\n" + "=" * 60)
    if result.wasSuccessful():
        print("🎉 ALL TESTS PASSED! 🎉")
    elif result.testsRun:
        issues = len(result.failures) + len(result.errors)
        print(f"⚠️  Some tests failed. Success rate: {(result.testsRun - issues) / result.testsRun * 100:.1f}%")

    print("\n📋 TEST COVERAGE BY MODULE:")
    print("-" * 40)
    for module, description in MODULES:
        if os.path.exists(os.path.join(TESTS_DIR, f"test_{module}.py")):
            print(f"✅ {description}")
        else:
            print(f"❌ {description} - MISSING TEST FILE")

    return result.wasSuccessful()


def run_specific_module(module_name):
    """Run tests for a single module."""

    print(f"🎬 Running tests for module: {module_name}")
    print("=" * 60)

    if not os.path.exists(os.path.join(TESTS_DIR, f"test_{module_name}.py")):
        print(f"❌ Test file not found: tests/test_{module_name}.py")
        return False

    suite = unittest.TestLoader().loadTestsFromName(f'test_{module_name}')
    result = unittest.TextTestRunner(verbosity=2).run(suite)
    return result.wasSuccessful()


def check_dependencies():
    """Check that the runtime libraries are importable."""

    print("🔧 Checking Dependencies")
    print("-" * 40)

    missing = []
    for package_name, import_name in [('requests', 'requests'), ('streamlit', 'streamlit'), ('loguru', 'loguru')]:
        try:
            __import__(import_name)
            print(f"✅ {package_name}")
        except ImportError:
            print(f"❌ {package_name} - NOT FOUND")
            missing.append(package_name)

    if missing:
        print(f"\n⚠️  Missing packages: {', '.join(missing)}")
        print("💡 Install with: pip install " + " ".join(missing))
        return False

    print("\n✅ All dependencies satisfied!")
    return True


def main():
    if len(sys.argv) > 1:
        if sys.argv[1] == "--deps":
            return check_dependencies()
        if sys.argv[1] == "--help":
            print("🎬 Movie Browser Core Test Runner")
            print("\nUsage:")
            print("  python test_runner.py                 - Run all tests")
            print("  python test_runner.py --deps          - Check dependencies")
            print("  python test_runner.py <module_name>   - Run specific module tests")
            print("\nAvailable modules:")
            print("  " + ", ".join(module for module, _ in MODULES))
            return True
        return run_specific_module(sys.argv[1])

    if not check_dependencies():
        print("\n❌ Cannot run tests due to missing dependencies")
        return False

    print()
    return run_all_tests()


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
