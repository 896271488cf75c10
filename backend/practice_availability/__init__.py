"""
Practice Availability
Staff availability resolution for practice management
"""

__version__ = "0.1.0"
