"""Integration tests for artifact-sync.

These tests run the CLI, the sync command and the sync engine together
against scripted helpers and a real temporary working directory. No
remote service is contacted.

Run only these tests with:
    pytest tests/integration -m integration
"""
