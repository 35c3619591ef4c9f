"""
Command-line interface for client-spine.

Entry point: ``client-spine`` (see ``client_spine.cli.app``).
"""
