"""
Unit Tests Module

Contains unit tests for individual components:
- Domain models and settings persistence
- Analysis, naming, transcoder arguments and worker pool
- Tool location, process runner, runtime and CLI
"""
