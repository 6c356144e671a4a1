# ABOUTME: Librarium builds a browsable JSON catalogue from a folder of ebooks.
# ABOUTME: Scans files, enriches them from book APIs, and shards the result for the UI.

__version__ = "0.1.0"
