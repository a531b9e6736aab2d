"""
Folder Dedup - A CLI tool to deduplicate folders by content and merge them into one.

Features:
- Content-based duplicate detection (xxhash, md5, sha1 or sha256)
- Concurrent traversal with a fixed pool of worker threads
- Optional merge of unique files into the first folder, never overwriting names
- Dry-run mode that reports every action without touching the filesystem
- Progress visualization
"""

__version__ = "1.0.0"
