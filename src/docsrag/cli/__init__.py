"""docs-rag command line interface."""
