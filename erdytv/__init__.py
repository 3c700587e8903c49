"""ErdyTV - IPTV playlist catalog and player."""
__version__ = "0.1.0"
