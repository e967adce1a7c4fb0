"""
nido: compatibilidad, discovery y matches entre roommates.
"""

__version__ = "0.1.0"
