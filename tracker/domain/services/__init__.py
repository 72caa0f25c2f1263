"""Pure domain services for Tracker Core."""
