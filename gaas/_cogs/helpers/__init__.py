"""
General-purpose helpers not related to the gateway itself,
which are used to prepare and control the runtime environment.

As a rule of thumb, helpers MUST be abstracted from the gateway
to such an extent that they could be extracted as reusable libraries.
"""
