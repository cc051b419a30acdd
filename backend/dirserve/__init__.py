"""dirserve: browse, download, upload and delete files over HTTP."""

__version__ = "0.1.0"
