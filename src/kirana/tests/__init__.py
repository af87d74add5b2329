"""Tests for the kirana package."""
