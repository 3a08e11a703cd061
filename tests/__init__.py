"""Tests for the Ignition Watchdog integration."""
