"""
Salvo - a CLI for getting Kubernetes logs fast.

Uses the local machine's Kubernetes configuration to write the logs of
every pod in a namespace to a directory for local inspection.
"""

__version__ = "0.0.1"
__author__ = "Salvo Contributors"
