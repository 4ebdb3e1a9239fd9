"""
Core functionality for the Query Clip application.

This package contains the four pipeline stages: downloading the source
video, transcribing its audio, selecting time ranges and merging them.
"""
