"""Tests for the period_tracker integration."""
