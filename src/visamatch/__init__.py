"""Visa/job eligibility matching engine."""

__version__ = "0.1.0"
