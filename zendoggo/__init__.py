"""ZenDoggo — tasks, habits and the routines that group them."""

__version__ = "1.0.0"
