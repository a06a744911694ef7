"""Insert ``our $VERSION = '...';`` at ``# VERSION`` comments in Perl files
without changing their line count."""

__all__ = ["__version__"]

__version__ = "0.1.0"
