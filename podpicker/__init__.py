"""
PodPicker transcript acquisition.

Turns a YouTube URL or video ID into an ordered, timed transcript.
"""

__version__ = "0.1.0"
