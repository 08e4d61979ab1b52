"""
PashuNetra - cattle capture and breed identification station

This package contains the capture adapter, the five-step identification wizard,
the pluggable breed classifiers and the session/portal helpers used by app.py.
"""

__version__ = "1.0.0"
__author__ = "Cattle Breed AI Team"
__description__ = "Capture-and-identification station for indigenous cattle breeds"
