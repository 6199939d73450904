"""Core organizer modules."""
