"""Built-in pipeline units, one module per phase family."""
