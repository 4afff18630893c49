"""Tests - Test suite and test circuits."""
