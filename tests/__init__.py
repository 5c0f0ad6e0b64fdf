"""Test package initialiser.

What:
  Marks ``tests`` as a package so pytest can import shared helpers from nested
  modules such as ``tests.unit.fakes``.

Why:
  Keeping a package structure makes imports deterministic when suites are run
  from the repository root.

How:
  The file exposes no symbols and has no side effects.
"""
