"""
Model Gateway
=============
Task-routed, multi-provider AI request gateway with admission control.
"""

__version__ = "1.0.0"
