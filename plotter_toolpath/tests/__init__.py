"""Tests for plotter_toolpath."""
