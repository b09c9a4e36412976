"""docs-rag - retrieval-augmented question answering over local document collections."""

__version__ = "0.1.0"
