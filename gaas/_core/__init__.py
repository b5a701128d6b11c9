"""
The core of the gateway: the CRD client, the REST façade, the logging setup,
and the login methods. The core is built on top of the cogs.
"""
