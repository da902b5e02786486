"""
Command line demo for authzgate.
"""
