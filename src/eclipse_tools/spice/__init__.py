"""SPICE layer: kernel bookkeeping and loading through cspyce."""
