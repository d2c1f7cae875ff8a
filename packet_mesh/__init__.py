"""Animated packet network simulation engine.

The package builds a decorative network of drifting nodes, routes packets
across it hop by hop and keeps track of the short-lived visual effects a
renderer draws on top of it.
"""
