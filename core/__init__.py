"""
Core Module - Application Configuration and Constants

Contains core application components:
- config: Settings persistence with JSON storage
- constants: Application constants and defaults
"""
