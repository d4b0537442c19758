"""DeepWiki container launcher: build stages and the two-server runtime supervisor."""

__version__ = "0.1.0"
