"""Product-signal recommendation service backed by a multi-provider LLM router."""
