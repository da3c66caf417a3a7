"""Examples directory.

This directory primarily exists so that we can:
1. Run linting checks on the examples we embed in our documentation.
2. Reduce code duplication. The end-to-end SQL example is exported from here to the README.
"""
