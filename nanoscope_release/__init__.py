"""Release automation for Nanoscope distributions and its Homebrew tap."""

__version__ = "0.4.0"
