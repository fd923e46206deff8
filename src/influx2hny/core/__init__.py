"""Domain models, ports and the aggregation/flush engine."""
