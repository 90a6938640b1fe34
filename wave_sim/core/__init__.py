"""Core components for the simulated network.

This module contains the environment the harness is driven on: packets,
addresses, channels, nodes, UDP sockets and the Simulator itself.
"""
