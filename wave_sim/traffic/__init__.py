"""Traffic generation and reception for the harness.

This module provides the payload buffer, the timed traffic generator and
one-shot sender, the packet sink application and the receive tracers.
"""
