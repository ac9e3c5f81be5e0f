"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested in isolation with mocked dependencies.
Unit tests should be fast, deterministic, and focused.

Test Files:
    - test_view_engine.py: Tag row filter and sort
    - test_windowing.py: Visible window arithmetic
    - test_progress_aggregator.py: Run progress folding
    - test_config_loader.py: Configuration loading/validation
"""
