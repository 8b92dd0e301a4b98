"""
Unit tests for the CMR transmit library
"""
