#!/usr/bin/env python3
"""
Test runner for the shortlink service.

Usage:
    python run_tests.py              # whole suite
    python run_tests.py concurrent   # only tests whose name matches
"""

import os
import subprocess
import sys

TEST_DATABASES = ("test.db", "test_app.db")


def cleanup_databases():
    """Remove SQLite files left behind by the suite"""
    for name in TEST_DATABASES:
        for suffix in ("", "-wal", "-shm"):
            path = name + suffix
            if os.path.exists(path):
                os.remove(path)


def run_tests(keyword=None):
    """Run the test suite"""
    print("Running shortlink service tests")
    print("=" * 40)

    os.chdir(os.path.dirname(os.path.abspath(__file__)))

    command = [sys.executable, "-m", "pytest", "tests/", "-v", "--tb=short"]
    if keyword:
        command += ["-k", keyword]

    try:
        subprocess.run(command, check=True)
        print("\nAll tests passed")
        return 0
    except subprocess.CalledProcessError as e:
        print(f"\nTests failed with exit code {e.returncode}")
        return e.returncode
    except FileNotFoundError:
        print("pytest not found. Install with: pip install -e '.[test]'")
        return 1
    finally:
        cleanup_databases()


if __name__ == "__main__":
    sys.exit(run_tests(sys.argv[1] if len(sys.argv) > 1 else None))
