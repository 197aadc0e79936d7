"""metaview - metadata tables for list items across an Obsidian-style vault."""

__version__ = "0.1.0"
