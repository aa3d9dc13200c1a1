"""Selection tracker: history, ranking and favorites over an editor's objects."""

__version__ = "0.1.0"
