"""Data models for the smart organizer."""
