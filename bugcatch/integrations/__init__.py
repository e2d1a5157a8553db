"""
Framework integrations.

Each module wires one web framework's request lifecycle into the public
client operations and nothing more:
- ``flask`` – breadcrumbs, request metrics and unhandled-exception capture
"""
