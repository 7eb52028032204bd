"""Admin system monitor."""
