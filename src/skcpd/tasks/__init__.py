"""
The :mod:`skcpd.tasks` module gathers the registration loop and its one-shot
entry points.
"""

from .registration import Registration, nonrigid, nonrigid_quick
