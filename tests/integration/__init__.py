"""
repo-catalog — integration test package

File: tests/integration/__init__.py

Purpose
- Test package marker for tests that run the CLI as a subprocess.
"""
