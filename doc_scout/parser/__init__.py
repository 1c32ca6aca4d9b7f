"""doc_scout.parser: HTML normalization and content extraction."""
