"""FreeWill: autonomous task-category priorities for colony agents."""

__version__ = "0.1.0"
