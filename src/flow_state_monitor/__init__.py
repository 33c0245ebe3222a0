"""Study-space flow state monitoring and forecasting."""

__version__ = "0.1.0"
