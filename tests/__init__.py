"""
HRG Sampler Test Suite.

Unit and integration tests for the multiplicity sampler:
- Quantum-number grouping and multinomial tables
- Fixed-difference pair statistics
- GCE, CE, SCE and CCE samplers
- Event generator configuration and dispatch

Test Files:
- test_configuration.py: Tests for configuration, species and kinematics
- test_grouping.py: Tests for quantum-number groups and group pairs
- test_tables.py: Tests for the multinomial table builder
- test_pair_statistics.py: Tests for FixedDifferencePair
- test_samplers.py: Tests for the ensemble samplers
- test_generator.py: Integration tests for EventGeneratorBase
- test_reporting.py: Tests for batch summaries

Usage:
    # Run all tests
    pytest tests/ -v

    # Run specific test file
    pytest tests/test_samplers.py -v

    # Run only unit tests (fast)
    pytest tests/ -m unit -v

    # Run only integration tests
    pytest tests/ -m integration -v

    # Skip slow tests
    pytest tests/ -m "not slow" -v
"""
