"""dirmirror - Incremental mirroring of remote directory indexes."""

__version__ = "0.1.0"
