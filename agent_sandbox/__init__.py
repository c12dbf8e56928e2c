"""lucos agent sandbox - repository setup for the coding-agent VM."""

__version__ = "1.0.0"
