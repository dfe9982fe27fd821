"""skillsync: discover, deduplicate and install agent skill packages."""

__version__ = "0.1.0"
