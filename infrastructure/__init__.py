"""
Infrastructure Layer - External Tools and Audio I/O

This layer locates and runs the external ffmpeg/ffprobe executables and
reads audio files in fixed-size blocks.

Modules:
- tools: ffmpeg/ffprobe resolution and single-flight caching
- process: Subprocess execution with concurrent pipe draining
- audio_engine: Streaming audio reader (soundfile)
"""
