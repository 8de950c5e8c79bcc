"""Invoice export form and API."""
