"""
Domain Layer - Core Business Entities and Value Objects

This layer defines the entities processed by the application and the
rules they obey, independent of ffmpeg, the file system and the front end.

Modules:
- models: Settings, jobs, file items and analysis results
- exceptions: Domain-specific exceptions
"""
