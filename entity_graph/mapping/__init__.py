"""Mapping layer - entity metadata, materialized entities and projection."""

from __future__ import annotations

from entity_graph.mapping.aggregate import GraphAssembler
from entity_graph.mapping.builder import EntityTypeBuilder, entity, schema
from entity_graph.mapping.entity import Deferred, Entity, Loaded, RelationState
from entity_graph.mapping.metadata import EntityType, JoinTable, Relationship, Schema
from entity_graph.mapping.model import ModelMapper
from entity_graph.mapping.plan import EntityPlan

__all__ = [
    "EntityType",
    "Relationship",
    "JoinTable",
    "Schema",
    "EntityTypeBuilder",
    "entity",
    "schema",
    "Entity",
    "Loaded",
    "Deferred",
    "RelationState",
    "GraphAssembler",
    "EntityPlan",
    "ModelMapper",
]
