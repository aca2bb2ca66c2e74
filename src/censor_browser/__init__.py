"""Censor Browser - Regulator Simulator.

A satirical terminal browser in which you play an internet regulator:
browse AI-generated websites, throttle or block them, negotiate with their
owners and defend your blocks before an AI court.
"""

__version__ = "0.1.0"
