"""
Command line interface for the weekly watch.
"""
