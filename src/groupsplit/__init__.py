"""GroupSplit: track shared expenses in a group and work out who owes whom."""

__version__ = "0.1.0"
