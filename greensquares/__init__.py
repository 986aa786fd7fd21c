"""GreenSquares backend: GitHub OAuth sessions, profile stats and quick commits."""

__version__ = "0.1.0"
