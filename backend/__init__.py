"""
Backend package for the calculation service.

This package provides a FastAPI application that exposes the calculation
engine, plus the history store and commit queue that persist finished
calculations.
"""
