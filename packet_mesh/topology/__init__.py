"""Graph construction for the packet network.

This module provides node placement and edge generation strategies.
"""
