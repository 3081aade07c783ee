"""
E-Commerce Dashboard Engine

Filter-aware aggregation over a fixed corpus of e-commerce facts.
"""

__version__ = "1.0.0"
