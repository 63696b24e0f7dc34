"""Resize a single raster image under size, orientation and resource constraints."""
