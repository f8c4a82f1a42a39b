"""Click commands for the jsan CLI."""
