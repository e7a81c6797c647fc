"""
Core modules for AgentCore Cost.

This package contains the pricing catalogs, input validation and
sanitization, the calculation engine and the analyses built on it.
"""
