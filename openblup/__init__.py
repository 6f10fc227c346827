"""Variance structures, relationship matrices and EM-REML for breeding mixed models."""

__version__ = "0.1.0"