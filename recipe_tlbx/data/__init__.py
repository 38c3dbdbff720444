"""Data module: roles, schemas, views and the synthetic example table."""

from .roles import ColumnInfo, ColumnType, Role, RoleRegistry, Schema
from .solubility import make_solubility_like
from .views import DatasetView


__all__ = ["ColumnInfo", "ColumnType", "DatasetView", "Role", "RoleRegistry", "Schema", "make_solubility_like"]
