"""Filesystem services: thin wrappers over the OS, no caching."""
