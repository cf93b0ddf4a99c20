"""ghbr: create and update Homebrew formulae from GitHub Releases."""

__version__ = "0.1.0"
