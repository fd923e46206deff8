"""Line protocol decoding and NDJSON encoding."""
