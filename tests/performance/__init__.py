"""
Performance Tests.

Benchmarks for DICOM Workbench responsiveness requirements:
    - Large tag records filter and sort interactively
    - Windowing stays constant-time over very long lists
    - Stats over thousands of records within seconds
"""
