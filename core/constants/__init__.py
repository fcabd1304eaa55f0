"""
Constants Module

Contains application constants:
- Supported audio formats
- Streaming chunk size
- Batch concurrency limit
- Waveform resolution
- Output and tool naming
"""

APP_NAME = "WavShaver"

# Extensions accepted when files are added to a session (lower case, no dot)
SUPPORTED_EXTENSION_LIST = (
    "wav", "aif", "aiff", "mp3", "flac", "m4a", "ogg", "opus", "caf", "wma", "aac",
)
SUPPORTED_EXTENSIONS = frozenset(SUPPORTED_EXTENSION_LIST)

# Frames per streaming read
CHUNK_FRAMES = 32768

# Jobs running their transcode pipeline at the same time
MAX_CONCURRENT_JOBS = 3

DEFAULT_WAVEFORM_BUCKETS = 500

# Level floor applied before converting to dB (about -240 dBFS)
LEVEL_FLOOR = 1e-12

DEFAULT_CHANNELS = 2

TRANSCODER_NAME = "ffmpeg"
PROBE_NAME = "ffprobe"

# Fixed storage identifier for persisted settings
SETTINGS_STORAGE_KEY = "WavShaverSettings"

# Fallback output directory under the user's music folder
MUSIC_SUBDIR = APP_NAME
