"""HTTP API serving live and static MARTA rail data, with its database models and clients."""

__version__ = "0.1"