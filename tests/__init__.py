"""
Test Suite for DICOM Workbench.

Test organization:
    - unit/: Unit tests for individual components
    - integration/: Orchestrator and explorer session against the mock backend
    - performance/: Benchmarks for view derivation, windowing and stats

Running Tests:
    pytest tests/                           # All tests
    pytest tests/unit/                      # Unit tests only
    pytest tests/integration/               # Integration tests only
    pytest -m "not slow"                    # Skip long benchmarks
    pytest --cov=src/dicom_workbench        # With coverage
"""
