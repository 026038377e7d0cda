"""
Ichinichi - Source Package

A personal cost tracker that answers one question for every purchase
or subscription: "what does this cost me per day?"

DESIGN PRINCIPLES:
1. One canonical number per item (cost per day), computed at write time
2. Month/year figures derived from the same nominal day counts
3. Validate at the boundary, never inside the engine
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Ichinichi Team"
