"""
CounterProductive - button press log analytics

Turns an append-only log of button press counts into a statistical
summary and a rendered report.
"""

__version__ = "0.1.0"
