"""Infrastructure layer for Tracker Core: adapters, stubs, observability."""
