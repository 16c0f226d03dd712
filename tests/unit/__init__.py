"""Unit tests for the Endpoints deployment test harness.

Unit tests verify individual components in isolation using mocks.
No gcloud, network access or GCP project is required.

Run with: uv run pytest tests/unit/ -v
"""
