"""Click commands of the gitreconcile CLI."""
