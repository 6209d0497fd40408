"""Transport group optimization pipeline: preprocessing, grouping, routing and metrics."""
