"""
Integration Tests - Testing Components Together.

Integration tests use the MockRemoteGateway so no backend engine is
needed; events, reports and rejections come from the mock.

Test Files:
    - test_pipeline_orchestrator.py: Anonymize/convert runs end to end
    - test_tag_explorer_session.py: Folder browsing, pins and stats
"""
