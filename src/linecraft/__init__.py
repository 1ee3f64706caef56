"""LineCraft: block-placement puzzle engine with a gymnasium environment."""

__version__ = "0.1.0"
