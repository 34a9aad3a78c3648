"""
Population-adjusted malaria incidence, from monthly case reports to annual totals ready for presentation.
"""

import importlib.metadata

__version__ = importlib.metadata.version("malaria-incidence")
