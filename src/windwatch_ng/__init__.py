"""
WindWatch-NG: NWS wind alert monitor.
"""

__version__ = "1.0.0"
