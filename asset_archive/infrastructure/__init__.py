"""Infrastructure layer: adapters, stubs, monitoring and observability.

Implements the application ports. May import domain and application,
never bootstrap or workers.
"""
