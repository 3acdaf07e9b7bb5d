"""Adapters layer - connects the tuner to the outside world.

Inbound adapters:
    - cli: Command line interface printing postgresql.conf settings
"""
