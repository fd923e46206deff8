"""Adapters: reader, emitters and the diagnostic log sink."""
