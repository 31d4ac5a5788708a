"""Core orchestration: conversations, prompt composition, document analysis."""
