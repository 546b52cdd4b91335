"""Core components for the full stack deployment setup.

This module contains the foundational components including configuration
handling, AWS client management, GitHub CLI and subprocess wrappers,
validation, and safety mechanisms.
"""
