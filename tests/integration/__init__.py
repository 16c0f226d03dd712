"""Integration tests for the Endpoints deployment test harness.

Integration tests deploy the sample to a real App Engine project and probe it.
They need gcloud on PATH and the RUN_DEPLOYMENT_TESTS / GOOGLE_* variables.

Run with: uv run pytest tests/integration/ -v -m integration
"""
