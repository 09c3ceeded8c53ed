"""
Configuration module.

Default parameters, YAML overrides with 3-tier precedence, and validation.
"""
