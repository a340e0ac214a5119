# a11y_scout/__init__.py
"""
A11y Scout package initializer.
Defines package version; the CLI lives in :mod:`a11y_scout.cli`.
"""
__version__ = "0.1.0"
