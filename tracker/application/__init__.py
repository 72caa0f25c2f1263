"""Application layer for Tracker Core: ports and orchestration services."""
