"""PII Protector: validate and reconcile LLM-proposed PII spans."""
