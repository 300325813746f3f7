"""
Command-line interface for the LC-3 toolchain.
"""
