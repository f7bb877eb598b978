"""Tests for the CarNet and MusicCast integrations."""
