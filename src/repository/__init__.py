"""GitHub repository setup.

This package creates GitHub environments, uploads project variables and
secrets from .env, stores deployment credentials and validates the
Route53 hosted zones the configured domains depend on.
"""
