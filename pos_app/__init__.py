"""
                Restaurant POS Ordering Core

Menu catalog, cart builder, order history and best-effort cloud sync
for a single-device restaurant point of sale.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
