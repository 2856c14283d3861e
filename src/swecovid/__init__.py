"""
Weekly reconciliation of Swedish Covid-19 case, testing and mortality statistics.
"""

import importlib.metadata

__version__ = importlib.metadata.version("swecovid")
