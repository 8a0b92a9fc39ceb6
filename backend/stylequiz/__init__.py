"""Brand style quiz: binary-choice scoring and template matching."""

__version__ = "1.0.0"
