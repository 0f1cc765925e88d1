"""
Centralized mock objects for testing.

This package provides reusable fakes for transports and WebSockets,
reducing code duplication across test files.
"""
