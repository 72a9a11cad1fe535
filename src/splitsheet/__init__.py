"""SplitSheet - trip expense splitting backed by Google Sheets."""

__version__ = "0.1.0"
