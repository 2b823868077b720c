"""
gaana-stream: resolve Gaana tracks into playable HLS segment lists.
"""

__version__ = "1.0.0"
