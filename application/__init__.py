"""
Application Layer - Business Logic and Services

This layer implements the use cases, coordinates between the front end and
the Domain/Infrastructure layers, manages session state and runs the
asynchronous work using asyncio.

Modules:
- analysis: Streaming loudness statistics and waveform summaries
- batch_processor: Bounded-concurrency ffmpeg transcode pipeline
- session: File list, settings and processing facade
"""
