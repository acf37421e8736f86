"""HackerOS Builder - orchestration around Debian live-build.

This package resolves the build track, translates profile descriptions into
live-build's configuration layout, drives the `lb` pipeline and handles the
resulting ISO image.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
