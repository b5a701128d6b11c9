"""
Detecting the gateway's own version.

The version is taken from the installed distribution's metadata,
and is determined only once at startup when the code is loaded.
"""
import importlib.metadata

version: str | None = None

try:
    name, *_ = __name__.split('.')  # usually "gaas", unless renamed/forked.
    version = importlib.metadata.version(name)
except importlib.metadata.PackageNotFoundError:
    pass  # running from a source tree without installation.
