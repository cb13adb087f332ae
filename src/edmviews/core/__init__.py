"""Core building blocks: namespaces, splitting, hashing, artifacts, loading."""
