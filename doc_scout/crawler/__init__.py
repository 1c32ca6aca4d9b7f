"""doc_scout.crawler: orchestrator, transport, relevance filter and page models."""
