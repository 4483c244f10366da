"""Data models for selfupdate."""

from selfupdate.models.release import RawAsset, RawRelease, Release

__all__ = ["RawAsset", "RawRelease", "Release"]
