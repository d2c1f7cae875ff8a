"""Metrics, visualization and random number helpers."""
