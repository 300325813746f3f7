"""
Test package for lc3-toolchain.

This package contains:
- Unit tests for the lexer, parser, formatter, linter and support modules
- Integration tests driving the command-line interface
- Property-based tests using Hypothesis
"""
