"""
Integration Tests Module

Contains integration tests for component interactions:
- test_orchestrator: Concurrency, failure isolation and cancellation
- test_end_to_end: Full batch runs with fake ffmpeg/ffprobe executables
"""
