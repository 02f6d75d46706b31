"""
ARMPWatch - Tender notice extractor for the ARMP procurement portal.

A CLI tool that reads the calls-for-tenders listing, turns each entry
into a flat notice record and writes the list as YAML or JSON.
"""

__version__ = "0.1.0"
__app_name__ = "armpwatch"
