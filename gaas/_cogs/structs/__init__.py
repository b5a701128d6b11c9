"""
All the data structures passed between the layers of the gateway:
resource references, credentials, request and response bodies, manifests.

All the functions here are purely data-manipulative.
No external calls or any i/o activities are done here.
"""
