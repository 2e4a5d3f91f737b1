"""
Seraph: lexical ensemble ranking of social-media profiles.
"""

__version__ = "1.0.0"
