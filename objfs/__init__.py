"""Inode layer and file system wrappers for object storage buckets."""

__version__ = "0.1.0"