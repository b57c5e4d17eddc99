"""clocktimer: a drift-free countdown timer engine for a clock app's timer screen."""

__version__ = "0.1.0"
