"""
Core utilities and shared components for mediadeck.

This package provides common functionality used across the application:
- Custom middleware
- Utility functions
"""
