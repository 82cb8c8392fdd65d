"""
Command-line entry point
"""
