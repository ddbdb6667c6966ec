"""
CoreComply - evidence discovery, RASCI adoption and setup tracking for
Australian payroll compliance.
"""

from .core.config import VERSION

__version__ = VERSION
