"""
Data Generation Module
"""
from .generators import DemoPayloadGenerator

__all__ = ["DemoPayloadGenerator"]
