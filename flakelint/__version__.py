"""
flakelint version information.

This module provides a single source of truth for the package version.
It follows Semantic Versioning: https://semver.org/

Examples:
    0.1.0
    0.2.0.dev0
"""

__version__ = "0.2.0.dev0"
