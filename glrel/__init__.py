"""Publish GitLab releases from a release pipeline."""

__version__ = "0.1.0"
