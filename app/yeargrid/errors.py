from __future__ import annotations


class YearGridError(Exception):
    """Base class for errors the CLI reports without a traceback."""


class ManifestError(YearGridError):
    pass


class SlideshowError(YearGridError):
    pass


class ConfigError(YearGridError):
    pass
