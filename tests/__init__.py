"""
Tests Module

Contains test suites for all application layers:
- unit: Unit tests for individual components
- integration: Batch runs across the orchestrator, tools and file system
"""
