"""
Model Table — Module 1
======================
Flat, parent-indexed snapshot of a loaded mechanism.

Quick start::

    from src.modules.m1_model_table import Body, FlatModelTable

    table = FlatModelTable((Body(0, "world", 0), Body(1, "trunk", 0)))
    table.validate()
"""
from .models import Body, FlatModelTable, Geom, GeomKind, MeshData, make_table

__all__ = ["Body", "FlatModelTable", "Geom", "GeomKind", "MeshData", "make_table"]
