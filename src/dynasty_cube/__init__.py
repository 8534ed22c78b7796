"""Dynasty Cube — collaborative trading-card draft league backend.

The server-side core of the league: card pool and draft picks, a
rate-limited CubeCobra client for card ratings, and a live draft
event stream for connected browsers.
"""

__version__ = "0.1.0"
