"""Console and Matrix connectors (prompt loop and reminder delivery)."""
