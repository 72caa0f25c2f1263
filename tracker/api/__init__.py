"""HTTP surface for Tracker Core.

A thin FastAPI layer: each mutation maps to one endpoint and each domain
error to one status code. All rules live in the application services.
"""
