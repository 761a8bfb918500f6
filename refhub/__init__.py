"""Reference Hub — link-rot monitor for curated reference documents."""

__version__ = "1.0.0"
