"""
Smoke tests to verify all critical dependencies are installed correctly.

These tests confirm that:
1. Python 3.11+ is installed
2. All core dependencies are importable
3. Async functionality is available
4. Project version is accessible

Run with: pytest tests/unit/test_smoke.py -v
"""

import sys

import pytest


class TestPythonVersion:
    """Verify Python version requirements."""

    def test_python_311_or_higher(self) -> None:
        assert sys.version_info >= (3, 11), (
            f"Python 3.11+ required, got {sys.version_info.major}.{sys.version_info.minor}"
        )


class TestCoreFramework:
    """Verify core framework dependencies."""

    def test_fastapi_import(self) -> None:
        from fastapi import FastAPI

        assert FastAPI() is not None

    def test_pydantic_v2(self) -> None:
        """Pydantic v2 must be installed (request models use ConfigDict)."""
        import pydantic

        major_version = int(pydantic.VERSION.split(".")[0])
        assert major_version >= 2, f"Pydantic v2 required, got {pydantic.VERSION}"

    def test_structlog_import(self) -> None:
        import structlog

        assert structlog.get_logger() is not None

    def test_httpx_available_for_test_client(self) -> None:
        """fastapi.testclient needs httpx."""
        from fastapi.testclient import TestClient

        assert TestClient is not None


class TestProjectVersion:
    """Verify project version is accessible."""

    def test_version_accessible(self, project_version: str) -> None:
        assert project_version

    def test_version_format(self, project_version: str) -> None:
        parts = project_version.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


class TestAsyncCapabilities:
    """Verify async functionality works."""

    @pytest.mark.asyncio
    async def test_taskgroup_execution(self) -> None:
        import asyncio

        results: list[int] = []

        async def append(value: int) -> None:
            results.append(value)

        async with asyncio.TaskGroup() as tg:
            for value in range(3):
                tg.create_task(append(value))

        assert sorted(results) == [0, 1, 2]
