"""
Cogs are the low-level building blocks of the gateway: the API clients,
the configuration, the data structures, and the generic helpers.

Cogs do not depend on the core: the core depends on the cogs.
"""
