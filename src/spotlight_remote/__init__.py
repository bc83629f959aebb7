"""Spotlight Remote: steer a presentation spotlight from a phone's motion sensors."""

__version__ = "0.1.0"
