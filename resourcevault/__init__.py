"""ResourceVault: schema-driven resource console core."""

__version__ = "0.4.0"
