"""Report terraform results from CI to pull requests and chat."""

__version__ = "0.1.0"