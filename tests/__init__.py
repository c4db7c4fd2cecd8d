"""
Tests package for bskyclient

This package contains all unit and integration tests.

Test organization:
- test_records.py: Timestamp/language normalization and record/embed builders
- test_client.py: Login, posting, uploads and response decoding
- test_gif_video.py: GIF to MP4 transcoding and aspect-ratio detection
- test_result.py: Outcome wrapper used at API boundaries
- test_config.py: YAML config, credential resolution, logging setup
- test_bskypost.py: Command line entry point
- conftest.py: Shared fixtures and test utilities
"""

__version__ = "1.0.0"
