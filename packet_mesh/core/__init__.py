"""Core components for the packet network.

This module contains the fundamental classes of the engine, including Node,
Edge, Packet, the effect scheduler, the router and the Network facade.
"""
