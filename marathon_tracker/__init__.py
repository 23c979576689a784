"""
Marathon training tracker package.

This package provides a fixed 16-week marathon plan, a log of workout
completions (entered by hand or synced from Strava), and an analytics
engine that turns that log into weekly summaries, training metrics,
rolling statistics and insights.
"""

__version__ = "0.1.0"
